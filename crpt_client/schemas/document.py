"""Pydantic schemas for the registration API's create-document payload.

Field values are passed through as-is; the client does not interpret them.
JSON keys are camelCase on the wire, snake_case in Python.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Description(_CamelModel):
    """Document description block."""

    participant_inn: str | None = Field(
        default=None,
        description="Taxpayer number of the participant the document is filed for.",
    )


class Product(_CamelModel):
    """A single product entry in the document."""

    certificate_document: str | None = None
    certificate_document_date: str | None = None
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    tnved_code: str | None = None
    uid_code: str | None = None
    uitu_code: str | None = None
    reg_date: str | None = None
    reg_number: str | None = None


class Document(_CamelModel):
    """Document submitted to the create-document endpoint."""

    description: Description | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str | None = None
    import_request: bool = Field(
        default=False,
        description="Whether the document registers imported goods.",
    )
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: list[Product] = Field(default_factory=list)
    reg_date: str | None = None
    reg_number: str | None = None
