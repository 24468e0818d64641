"""GraphQL HTTP endpoint.

Learn: Strawberry's FastAPI router does the HTTP work. We override
process_result to shape errors the way clients of this API expect:

    {"message": ..., "status": <code>, "data": <detail or null>}

Domain errors carry their own status and detail. Anything else is a 500.
Parse/validation errors from GraphQL itself (no underlying exception)
keep the standard GraphQL error shape.
"""

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.fastapi import GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionResult

from inkpost.errors import InkpostError
from inkpost.graphql.context import get_context
from inkpost.graphql.schema import schema


def format_error(error: GraphQLError) -> dict:
    original = error.original_error
    if original is None:
        return error.formatted
    if isinstance(original, InkpostError):
        return original.to_dict()
    return {"message": error.message, "status": 500, "data": None}


class InkpostGraphQLRouter(GraphQLRouter):
    async def process_result(
        self, request: Request, result: ExecutionResult
    ) -> GraphQLHTTPResponse:
        response: GraphQLHTTPResponse = {"data": result.data}
        if result.errors:
            response["errors"] = [format_error(err) for err in result.errors]
        if result.extensions:
            response["extensions"] = result.extensions
        return response


def create_graphql_router() -> InkpostGraphQLRouter:
    return InkpostGraphQLRouter(schema, context_getter=get_context)
