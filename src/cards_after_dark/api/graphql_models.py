"""Pydantic models for the GraphQL HTTP transport."""

from pydantic import BaseModel, ConfigDict, Field


class GraphQLRequest(BaseModel):
    """Body of a GraphQL POST request."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    variables: dict[str, object] | None = None
    operation_name: str | None = Field(default=None, alias="operationName")
