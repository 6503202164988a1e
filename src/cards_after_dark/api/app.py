"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from cards_after_dark.api.graphql_models import GraphQLRequest
from cards_after_dark.api.schema import schema
from cards_after_dark.app_logging import configure_logging
from cards_after_dark.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/graphql")
    async def graphql(
        payload: GraphQLRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> JSONResponse:
        """Execute a GraphQL operation for the authenticated user.

        The ``X-User-Id`` header is set by the upstream authorizer.
        """
        if not payload.query.strip():
            return JSONResponse(
                {"errors": [{"message": "query is required"}]}, status_code=400
            )
        state_container: AppContainer = request.app.state.container
        result = await schema.execute_async(
            payload.query,
            variable_values=payload.variables,
            operation_name=payload.operation_name,
            context_value={
                "container": state_container,
                "user_id": _parse_user_id(x_user_id),
            },
        )
        body: dict[str, object] = {}
        if result.errors:
            for error in result.errors:
                if error.original_error is not None:
                    logger.info("GraphQL error: %s", error.message)
            body["errors"] = [error.formatted for error in result.errors]
        if result.data is not None:
            body["data"] = result.data
        status_code = 400 if result.errors and result.data is None else 200
        return JSONResponse(body, status_code=status_code)

    return app


def _parse_user_id(raw: str | None) -> UUID | None:
    if not raw:
        return None
    try:
        return UUID(raw.strip())
    except ValueError:
        return None
