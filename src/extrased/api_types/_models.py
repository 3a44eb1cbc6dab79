"""Google Docs API types for the parts of a document extrased reads.

Models follow the REST representation (camelCase aliases). Unknown
fields are kept (``extra="allow"``), so documents round-trip through
``model_validate`` / ``model_dump(by_alias=True)`` without loss.
Enum-valued fields are plain strings.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Dimension(BaseModel):
    """A magnitude in a single direction in the specified units."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    magnitude: float | None = Field(None)
    unit: str | None = Field(None)


class Link(BaseModel):
    """A reference to another portion of a document or an external URL resource."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    bookmark_id: str | None = Field(None, alias="bookmarkId")
    heading_id: str | None = Field(None, alias="headingId")
    url: str | None = Field(None)


class TextStyle(BaseModel):
    """Represents the styling that can be applied to text."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    baseline_offset: str | None = Field(None, alias="baselineOffset")
    bold: bool | None = Field(None)
    font_size: Dimension | None = Field(None, alias="fontSize")
    italic: bool | None = Field(None)
    link: Link | None = Field(None)
    small_caps: bool | None = Field(None, alias="smallCaps")
    strikethrough: bool | None = Field(None)
    underline: bool | None = Field(None)


class ParagraphStyle(BaseModel):
    """Styles that apply to a whole paragraph."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    alignment: str | None = Field(None)
    indent_start: Dimension | None = Field(None, alias="indentStart")
    line_spacing: float | None = Field(None, alias="lineSpacing")
    named_style_type: str | None = Field(None, alias="namedStyleType")


class TextRun(BaseModel):
    """A ParagraphElement that represents a run of text that all has the same styling."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: str | None = Field(None)
    text_style: TextStyle | None = Field(None, alias="textStyle")


class InlineObjectElement(BaseModel):
    """A ParagraphElement that contains an InlineObject."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    inline_object_id: str | None = Field(None, alias="inlineObjectId")


class FootnoteReference(BaseModel):
    """A ParagraphElement representing a footnote reference."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    footnote_id: str | None = Field(None, alias="footnoteId")
    footnote_number: str | None = Field(None, alias="footnoteNumber")


class PersonProperties(BaseModel):
    """Properties specific to a linked Person."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    email: str | None = Field(None)
    name: str | None = Field(None)


class Person(BaseModel):
    """A person or email address mentioned in a document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    person_id: str | None = Field(None, alias="personId")
    person_properties: PersonProperties | None = Field(None, alias="personProperties")


class ParagraphElement(BaseModel):
    """A ParagraphElement describes content within a Paragraph."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    end_index: int | None = Field(None, alias="endIndex")
    footnote_reference: FootnoteReference | None = Field(
        None, alias="footnoteReference"
    )
    inline_object_element: InlineObjectElement | None = Field(
        None, alias="inlineObjectElement"
    )
    person: Person | None = Field(None)
    start_index: int | None = Field(None, alias="startIndex")
    text_run: TextRun | None = Field(None, alias="textRun")


class Bullet(BaseModel):
    """Describes the bullet of a paragraph."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    list_id: str | None = Field(None, alias="listId")
    nesting_level: int | None = Field(None, alias="nestingLevel")


class Paragraph(BaseModel):
    """A StructuralElement representing a paragraph."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    bullet: Bullet | None = Field(None)
    elements: list[ParagraphElement] | None = Field(None)
    paragraph_style: ParagraphStyle | None = Field(None, alias="paragraphStyle")
    positioned_object_ids: list[str] | None = Field(None, alias="positionedObjectIds")


class SectionColumnProperties(BaseModel):
    """Properties that apply to a section's column."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    padding_end: Dimension | None = Field(None, alias="paddingEnd")
    width: Dimension | None = Field(None)


class SectionStyle(BaseModel):
    """The styling that applies to a section."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    column_properties: list[SectionColumnProperties] | None = Field(
        None, alias="columnProperties"
    )
    column_separator_style: str | None = Field(None, alias="columnSeparatorStyle")
    section_type: str | None = Field(None, alias="sectionType")


class SectionBreak(BaseModel):
    """A StructuralElement representing a section break."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    section_style: SectionStyle | None = Field(None, alias="sectionStyle")


class TableCell(BaseModel):
    """The contents and style of a cell in a Table."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: list[StructuralElement] | None = Field(None)
    end_index: int | None = Field(None, alias="endIndex")
    start_index: int | None = Field(None, alias="startIndex")


class TableRow(BaseModel):
    """The contents and style of a row in a Table."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    end_index: int | None = Field(None, alias="endIndex")
    start_index: int | None = Field(None, alias="startIndex")
    table_cells: list[TableCell] | None = Field(None, alias="tableCells")


class Table(BaseModel):
    """A StructuralElement representing a table."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    columns: int | None = Field(None)
    rows: int | None = Field(None)
    table_rows: list[TableRow] | None = Field(None, alias="tableRows")


class TableOfContents(BaseModel):
    """A StructuralElement representing a table of contents."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: list[StructuralElement] | None = Field(None)


class StructuralElement(BaseModel):
    """A StructuralElement describes content that provides structure to the document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    end_index: int | None = Field(None, alias="endIndex")
    paragraph: Paragraph | None = Field(None)
    section_break: SectionBreak | None = Field(None, alias="sectionBreak")
    start_index: int | None = Field(None, alias="startIndex")
    table: Table | None = Field(None)
    table_of_contents: TableOfContents | None = Field(None, alias="tableOfContents")


class Body(BaseModel):
    """The document body."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: list[StructuralElement] | None = Field(None)


class Footnote(BaseModel):
    """A document footnote."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: list[StructuralElement] | None = Field(None)
    footnote_id: str | None = Field(None, alias="footnoteId")


class EmbeddedObject(BaseModel):
    """An embedded object in the document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    description: str | None = Field(None)
    title: str | None = Field(None)


class InlineObjectProperties(BaseModel):
    """Properties of an InlineObject."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    embedded_object: EmbeddedObject | None = Field(None, alias="embeddedObject")


class InlineObject(BaseModel):
    """An object that appears inline with text, such as an image."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    inline_object_properties: InlineObjectProperties | None = Field(
        None, alias="inlineObjectProperties"
    )
    object_id: str | None = Field(None, alias="objectId")


class PositionedObjectProperties(BaseModel):
    """Properties of a PositionedObject."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    embedded_object: EmbeddedObject | None = Field(None, alias="embeddedObject")


class PositionedObject(BaseModel):
    """An object tethered to a Paragraph and positioned relative to it."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    object_id: str | None = Field(None, alias="objectId")
    positioned_object_properties: PositionedObjectProperties | None = Field(
        None, alias="positionedObjectProperties"
    )


class NestingLevel(BaseModel):
    """Properties of a list bullet at a given level of nesting."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    glyph_symbol: str | None = Field(None, alias="glyphSymbol")
    glyph_type: str | None = Field(None, alias="glyphType")


class ListProperties(BaseModel):
    """The look and feel of bullets belonging to a list."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    nesting_levels: list[NestingLevel] | None = Field(None, alias="nestingLevels")


class List(BaseModel):
    """The list attributes for a group of paragraphs that all belong to the same list."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    list_properties: ListProperties | None = Field(None, alias="listProperties")


class Document(BaseModel):
    """A Google Docs document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    body: Body | None = Field(None)
    document_id: str | None = Field(None, alias="documentId")
    footnotes: dict[str, Footnote] | None = Field(None)
    inline_objects: dict[str, InlineObject] | None = Field(None, alias="inlineObjects")
    lists: dict[str, List] | None = Field(None)
    positioned_objects: dict[str, PositionedObject] | None = Field(
        None, alias="positionedObjects"
    )
    revision_id: str | None = Field(None, alias="revisionId")
    title: str | None = Field(None)


# --- batchUpdate responses ---


class CreateFootnoteResponse(BaseModel):
    """The result of creating a footnote."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    footnote_id: str | None = Field(None, alias="footnoteId")


class InsertInlineImageResponse(BaseModel):
    """The result of inserting an inline image."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    object_id: str | None = Field(None, alias="objectId")


class ReplaceAllTextResponse(BaseModel):
    """The result of replacing text."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    occurrences_changed: int | None = Field(None, alias="occurrencesChanged")


class Response(BaseModel):
    """A single response from an update."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    create_footnote: CreateFootnoteResponse | None = Field(None, alias="createFootnote")
    insert_inline_image: InsertInlineImageResponse | None = Field(
        None, alias="insertInlineImage"
    )
    replace_all_text: ReplaceAllTextResponse | None = Field(
        None, alias="replaceAllText"
    )


class BatchUpdateDocumentResponse(BaseModel):
    """Response message from a BatchUpdateDocument request."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    document_id: str | None = Field(None, alias="documentId")
    replies: list[Response] | None = Field(None)
