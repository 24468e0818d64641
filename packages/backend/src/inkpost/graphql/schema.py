"""GraphQL schema — queries and mutations.

Learn: Resolvers stay thin. They unpack arguments, call the service
layer with the request's identity, and convert the ORM result into
GraphQL types. Authentication and ownership rules live in the services.
"""

from typing import Optional

import strawberry
import structlog
from strawberry.types import Info

from inkpost.errors import InkpostError
from inkpost.graphql.types import (
    AuthData,
    LoginInput,
    Post,
    PostData,
    PostInput,
    SignupInput,
    User,
    post_from_model,
    user_from_model,
)
from inkpost.services.post_service import PostService
from inkpost.services.user_service import UserService

logger = structlog.get_logger()


@strawberry.type
class Query:
    @strawberry.field
    async def posts(self, info: Info, page: Optional[int] = None) -> PostData:
        svc = PostService(info.context.db)
        posts, total = await svc.list_posts(info.context.identity, page)
        return PostData(
            posts=[post_from_model(p) for p in posts],
            total_posts=total,
        )

    @strawberry.field
    async def post(self, info: Info, post_id: strawberry.ID) -> Post:
        svc = PostService(info.context.db)
        return post_from_model(await svc.get_post(info.context.identity, post_id))


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: Info, signup_input: SignupInput) -> User:
        svc = UserService(info.context.db)
        user = await svc.create_user(
            email=signup_input.email,
            name=signup_input.name,
            password=signup_input.password,
        )
        return user_from_model(user)

    @strawberry.mutation
    async def login(self, info: Info, login_input: LoginInput) -> AuthData:
        svc = UserService(info.context.db)
        token, user_id = await svc.login(login_input.email, login_input.password)
        return AuthData(token=token, user_id=user_id)

    @strawberry.mutation
    async def create_post(self, info: Info, post_input: PostInput) -> Post:
        svc = PostService(info.context.db)
        post = await svc.create_post(
            info.context.identity,
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
        )
        return post_from_model(post)

    @strawberry.mutation
    async def update_post(
        self, info: Info, post_id: strawberry.ID, post_input: PostInput
    ) -> Post:
        svc = PostService(info.context.db)
        post = await svc.update_post(
            info.context.identity,
            post_id,
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
        )
        return post_from_model(post)

    @strawberry.mutation
    async def delete_post(self, info: Info, post_id: strawberry.ID) -> bool:
        svc = PostService(info.context.db)
        return await svc.delete_post(info.context.identity, post_id)


class InkpostSchema(strawberry.Schema):
    """Schema that logs only unexpected errors.

    Domain errors (bad input, not logged in, not the owner) are normal
    traffic and are reported to the client without a traceback.
    """

    def process_errors(self, errors, execution_context=None) -> None:
        for error in errors:
            if isinstance(error.original_error, InkpostError):
                continue
            logger.error(
                "inkpost.graphql.error",
                message=error.message,
                path=error.path,
                exc_info=error.original_error,
            )


schema = InkpostSchema(query=Query, mutation=Mutation)
