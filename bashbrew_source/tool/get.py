"""Bashbrew-source get and list actions."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import sys
from typing import cast

from bashbrew_source.image import parse_image_name

from .common import add_source_flags, build_source, print_dockerfiles

_LOGGER = logging.getLogger(__name__)


class GetAction:
    """Resolve the Dockerfiles for a single image."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Resolve the Dockerfiles of an image",
                description=(
                    "Print the git location of the Dockerfiles of an image. All "
                    "tags are printed when the image has no tag."
                ),
            ),
        )
        args.add_argument(
            "image",
            help="Image name such as library/alpine:3.18",
        )
        add_source_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        image: str,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        image_name = parse_image_name(image)
        source = build_source(**kwargs)
        try:
            dockerfiles = await source.fetch_dockerfile(image_name)
        finally:
            source.close()
        if not dockerfiles:
            print(f"No Dockerfiles found for {image_name}", file=sys.stderr)
            return
        print_dockerfiles(dockerfiles, output)


class ListAction:
    """Resolve the Dockerfiles for every image in the library."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "list",
                aliases=["ls"],
                help="Resolve the Dockerfiles of every image",
                description="Print the git location of every Dockerfile in the library",
            ),
        )
        add_source_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        source = build_source(**kwargs)
        try:
            dockerfiles = await source.fetch_all()
        finally:
            source.close()
        _LOGGER.info("Resolved %d Dockerfiles", len(dockerfiles))
        print_dockerfiles(dockerfiles, output)
