"""InspectCommand: read a package and summarize its index.

This module implements the default command of the confluence-xml tool. It
reads a Confluence XML package, builds its entity index and reports what the
export contains, optionally listing the current pages of one space.
"""

import logging
from typing import List, Optional, Tuple

from src.confluence_xml.config import PackageConfig
from src.confluence_xml.errors import ConfluenceXMLError, MalformedStreamError, PackageSourceError
from src.confluence_xml.models import KEY_PAGE_TITLE
from src.confluence_xml.package import ConfluenceXMLPackage
from .errors import SpaceNotFoundError
from .models import ExitCode, PackageSummary, SpaceSummary
from .output import OutputHandler

logger = logging.getLogger(__name__)


class InspectCommand:
    """Reads a package and prints a summary of its content.

    Example:
        >>> command = InspectCommand(OutputHandler(verbosity=1))
        >>> exit_code = command.run("export.zip")
    """

    def __init__(self, output_handler: Optional[OutputHandler] = None, config: Optional[PackageConfig] = None):
        """Initialize the inspect command.

        Args:
            output_handler: Terminal output handler (defaults to a quiet one)
            config: Package reading configuration
        """
        self.output = output_handler or OutputHandler()
        self.config = config or PackageConfig()

    def run(self, source: str, space_key: Optional[str] = None) -> ExitCode:
        """Read source and print its summary.

        Args:
            source: Package directory, zip file or file URL
            space_key: Optional space whose current pages should be listed

        Returns:
            Exit code of the operation
        """
        try:
            with ConfluenceXMLPackage(self.config) as package:
                with self.output.spinner(f"Reading {source}..."):
                    package.read(source)
                self.output.success(f"Read package {source}")

                summary = self.build_summary(package)
                self.output.print_package_summary(summary)
                if summary.orphan_page_count > 0:
                    self.output.warning(f"{summary.orphan_page_count} page(s) belong to no space in the package")

                if space_key is not None:
                    pages = self.list_space_pages(package, space_key)
                    self.output.print_space_pages(space_key, pages)

            return ExitCode.SUCCESS

        except (PackageSourceError, MalformedStreamError) as e:
            logger.error(f"Invalid package: {e}")
            self.output.error(f"Invalid package: {e}")
            return ExitCode.INVALID_PACKAGE

        except SpaceNotFoundError as e:
            self.output.error(str(e))
            return ExitCode.GENERAL_ERROR

        except ConfluenceXMLError as e:
            logger.error(f"Failed to read package: {e}")
            self.output.error(f"Failed to read package: {e}")
            return ExitCode.GENERAL_ERROR

    @staticmethod
    def build_summary(package: ConfluenceXMLPackage) -> PackageSummary:
        """Count the entities of an indexed package."""
        summary = PackageSummary()

        for space_id in sorted(space_id for space_id in package.pages if space_id is not None):
            space_properties = package.get_space_properties(space_id)
            if space_properties is None:
                # Pages referencing a space that is not part of the export
                summary.orphan_page_count += len(package.pages[space_id])
                continue

            summary.spaces.append(SpaceSummary(
                space_id=space_id,
                key=package.space_key(space_properties),
                name=package.space_name(space_properties),
                page_count=len(package.pages[space_id]),
            ))

        summary.orphan_page_count += len(package.pages.get(None, []))

        for page_ids in package.pages.values():
            for page_id in page_ids:
                summary.attachment_count += len(package.get_attachments(page_id))

        summary.internal_user_count = len(package.get_internal_users())
        summary.user_impl_count = len(package.get_users_impl())
        summary.group_count = len(package.get_groups())

        logger.debug(f"Package summary: {summary}")
        return summary

    @staticmethod
    def list_space_pages(package: ConfluenceXMLPackage, space_key: str) -> List[Tuple[int, str]]:
        """Current pages of a space as (id, title) pairs in export order.

        Raises:
            SpaceNotFoundError: If no space has this key
        """
        space_id = package.spaces_by_key.get(space_key)
        if space_id is None:
            raise SpaceNotFoundError(space_key)

        pages = []
        for page_id in package.pages.get(space_id, []):
            page_properties = package.get_page_properties(page_id, create=True)
            pages.append((page_id, page_properties.get_string(KEY_PAGE_TITLE, "")))
        return pages
