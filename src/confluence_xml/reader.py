"""Single pass reader for the entities.xml object stream.

The stream is a flat sequence of ``object`` elements below the document
root. Each object declares its type in a ``class`` attribute and carries
``id``, ``property`` and ``collection`` children:

    <object class="Page" package="com.atlassian.confluence.pages">
      <id name="id">10</id>
      <property name="title"><![CDATA[Home]]></property>
      <property name="space" class="Space" package="...">
        <id name="id">1</id>
      </property>
      <collection name="bodyContents" class="java.util.Collection">
        <element class="BodyContent" package="..."><id name="id">11</id></element>
      </collection>
    </object>

Objects are parsed one at a time with lxml's iterparse and cleared as soon as
they have been turned into a property bag, so memory use does not grow with
the size of the export.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from lxml import etree

from .errors import MalformedStreamError, PackageSourceError
from .models import (
    ID_NAME_KEY,
    KEY_REFERENCE_CLASS,
    LIST_CLASSES,
    REFERENCE_CLASSES,
    SET_CLASS,
    EntityKind,
)
from .properties import DEFAULT_LIST_DELIMITER, ConfluenceProperties, PropertyValue

logger = logging.getLogger(__name__)

# Confluence nests CDATA sections by inserting a space after "]]" in the
# inner section end. It does not care whether a ">" follows.
BROKEN_CDATA_PATTERN = re.compile(r"\]\] +")
REPAIRED_CDATA_END = "]]"


def fix_cdata(text: Optional[str]) -> Optional[str]:
    """Undo the CDATA end damage Confluence applies to nested sections.

    Every "]]" followed by spaces becomes "]]". Applying it twice gives the
    same result as applying it once.

    Example:
        >>> fix_cdata("[[y]] \\n")
        '[[y]]\\n'
    """
    if text is None:
        return None
    return BROKEN_CDATA_PATTERN.sub(REPAIRED_CDATA_END, text)


def _local_name(element) -> str:
    return etree.QName(element).localname


@dataclass
class StreamObject:
    """One object of the stream, reduced to its identifier and properties.

    Attributes:
        kind: Entity kind derived from the class attribute
        class_name: Raw class attribute
        identifier: Primary id (int, or str for ConfluenceUserImpl), None if absent
        properties: Parsed properties
    """
    kind: EntityKind
    class_name: str
    identifier: Optional[Union[int, str]]
    properties: ConfluenceProperties


class ObjectStreamReader:
    """Reads entities.xml exactly once, yielding a StreamObject per object.

    Example:
        >>> reader = ObjectStreamReader("package/entities.xml")
        >>> for stream_object in reader.read():
        ...     print(stream_object.kind, stream_object.identifier)
    """

    def __init__(
        self,
        entities_file: Union[str, Path],
        list_delimiter: Optional[str] = DEFAULT_LIST_DELIMITER,
    ):
        self.entities_file = Path(entities_file)
        self.list_delimiter = list_delimiter

    def read(self) -> Iterator[StreamObject]:
        """Iterate over the objects of the stream.

        Raises:
            PackageSourceError: If the stream file cannot be opened
            MalformedStreamError: If the XML is not well formed or a reference
                has no id element
        """
        try:
            stream = open(self.entities_file, "rb")
        except OSError as e:
            raise PackageSourceError(str(self.entities_file), str(e))

        with stream:
            context = etree.iterparse(
                stream,
                events=("start", "end"),
                huge_tree=True,
                resolve_entities=False,
                no_network=True,
                remove_comments=True,
                remove_pis=True,
            )

            depth = 0
            try:
                for event, element in context:
                    if event == "start":
                        depth += 1
                        continue

                    depth -= 1
                    if depth != 1:
                        continue

                    # Direct child of the root element
                    try:
                        if _local_name(element) == "object":
                            stream_object = self._read_object(element)
                            if stream_object is not None:
                                yield stream_object
                        else:
                            logger.debug(f"Skipping top level element <{_local_name(element)}>")
                    finally:
                        element.clear()
                        while element.getprevious() is not None:
                            del element.getparent()[0]
            except etree.XMLSyntaxError as e:
                raise MalformedStreamError(str(e), str(self.entities_file))

    def _read_object(self, element) -> Optional[StreamObject]:
        class_name = element.get("class")
        if class_name is None:
            logger.debug("Skipping object without class attribute")
            return None

        kind = EntityKind.from_class(class_name)

        properties = ConfluenceProperties(list_delimiter=self.list_delimiter)
        if not kind.splits_lists:
            properties.disable_list_delimiter()

        identifier = self._read_object_properties(element, properties, kind.id_name)

        return StreamObject(
            kind=kind,
            class_name=class_name,
            identifier=identifier,
            properties=properties,
        )

    def _read_object_properties(
        self,
        element,
        properties: ConfluenceProperties,
        id_name: str,
    ) -> Optional[Union[int, str]]:
        """Fill properties from the children of an object element.

        Returns:
            The primary identifier, None if the object has none
        """
        identifier = None

        for child in element:
            child_name = _local_name(child)
            property_name = child.get("name")

            if child_name == "id":
                if property_name == id_name:
                    identifier = self._read_identifier(child, id_name)
                    if identifier is not None:
                        properties.set("id", identifier)
            elif property_name is None:
                continue
            elif child_name == "collection":
                properties.set(property_name, self._read_collection(child))
            elif child_name == "property":
                properties.set(property_name, self._read_property(child))

        return identifier

    def _read_identifier(self, element, id_name: str) -> Optional[Union[int, str]]:
        text = element.text or ""
        if id_name == ID_NAME_KEY:
            return fix_cdata(text)

        try:
            return int(text.strip())
        except ValueError:
            logger.warning(f"Invalid object id '{text}' at line {element.sourceline}, skipping object")
            return None

    def _read_collection(self, element) -> PropertyValue:
        items = (self._read_property(child) for child in element)
        if element.get("class") == SET_CLASS:
            return PropertyValue.set_of(items)
        return PropertyValue.list_of(items)

    def _read_property(self, element) -> PropertyValue:
        property_class = element.get("class")

        if property_class is None:
            if len(element):
                return PropertyValue.unsupported()
            return PropertyValue.string(fix_cdata(element.text or ""))

        if property_class in LIST_CLASSES:
            return PropertyValue.list_of(self._read_property(child) for child in element)
        if property_class == SET_CLASS:
            return PropertyValue.set_of(self._read_property(child) for child in element)
        if property_class in REFERENCE_CLASSES:
            return self._read_reference(element, numeric=True)
        if property_class == KEY_REFERENCE_CLASS:
            return self._read_reference(element, numeric=False)

        return PropertyValue.unsupported()

    def _read_reference(self, element, numeric: bool) -> PropertyValue:
        """Read the id of a referenced object, ignoring the rest of it.

        Raises:
            MalformedStreamError: If the first child is not an id element
        """
        id_element = next(iter(element), None)
        if id_element is None or _local_name(id_element) != "id":
            found = _local_name(id_element) if id_element is not None else f"/{_local_name(element)}"
            raise MalformedStreamError(
                f"Was expecting id element but found [{found}] at line {element.sourceline}",
                str(self.entities_file)
            )

        text = id_element.text or ""
        if not numeric:
            return PropertyValue.string(fix_cdata(text))

        try:
            return PropertyValue.long(int(text.strip()))
        except ValueError:
            logger.warning(f"Invalid reference id '{text}' at line {element.sourceline}")
            return PropertyValue.unsupported()
