# flake8: noqa E501

import argparse
import logging
import sys
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Add point markers to a GeoJSON file")


def parse_marker(value: str):
    """Parse ``LON,LAT[,INFO]``; info may contain commas."""
    parts = value.split(",", 2)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(
            _("Expected LON,LAT[,INFO], got {value!r}").format(value=value)
        )
    try:
        lon, lat = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(
            _("Invalid coordinates in {value!r}").format(value=value)
        )
    info = parts[2] if len(parts) == 3 else ""
    return lon, lat, info


def command(subparser):
    subparser.add_argument("input", type=Path)
    subparser.add_argument("output", type=Path)
    subparser.add_argument(
        "-m",
        "--marker",
        dest="markers",
        type=parse_marker,
        action="append",
        default=[],
        help=_("Marker as LON,LAT[,INFO] in the storage CRS"),
    )
    subparser.add_argument(
        "--restore-markers",
        action="store_true",
        help=_("Keep markers of a previous export editable"),
    )
    subparser.add_argument("--indent", type=int, default=None)

    def handle(args):
        from map_annotation.core.annotation import AnnotationSession
        from map_annotation.core.codec import ParseError
        from map_annotation.core.codec.geojson import get_transformer

        session = AnnotationSession()
        try:
            session.load_file(
                args.input.read_bytes(), restore_markers=args.restore_markers
            )
        except ParseError as e:
            print(_("Invalid file: {error}").format(error=e), file=sys.stderr)
            return 1

        to_working = get_transformer(session.storage_crs, session.working_crs)
        session.toggle_edit()
        session.enter_add()
        for lon, lat, info in args.markers:
            point = to_working.transform(lon, lat)
            session.create_at(point, lambda default, info=info: info)
        session.save()

        args.output.write_text(session.export_file(indent=args.indent))
        logger.info(
            _("Wrote {features} features and {markers} markers to {path}").format(
                features=len(session.base_features),
                markers=len(session.markers),
                path=args.output,
            )
        )
        return 0

    return handle
