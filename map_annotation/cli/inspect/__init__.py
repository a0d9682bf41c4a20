# flake8: noqa E501

import sys
from collections import Counter
from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Summarize the features of a GeoJSON file")


def command(subparser):
    subparser.add_argument("input", type=Path)

    def handle(args):
        from map_annotation.core.annotation import AnnotationSession
        from map_annotation.core.codec import ParseError
        from map_annotation.core.codec.geojson import get_transformer

        session = AnnotationSession()
        try:
            extent = session.load_file(args.input.read_bytes())
        except ParseError as e:
            print(_("Invalid file: {error}").format(error=e), file=sys.stderr)
            return 1

        print(_("Features: {count}").format(count=len(session.base_features)))
        types = Counter(f.geometry_type or "null" for f in session.base_features)
        for geom_type, count in sorted(types.items()):
            print(f"  {geom_type}: {count}")

        if extent is None:
            print(_("Extent: empty"))
            return 0

        to_storage = get_transformer(session.working_crs, session.storage_crs)
        min_x, min_y = to_storage.transform(extent.min_x, extent.min_y)
        max_x, max_y = to_storage.transform(extent.max_x, extent.max_y)
        print(
            _("Extent ({crs}): {extent}").format(
                crs=session.working_crs, extent=extent.to_tuple()
            )
        )
        print(
            _("Extent ({crs}): {extent}").format(
                crs=session.storage_crs, extent=(min_x, min_y, max_x, max_y)
            )
        )
        return 0

    return handle
