"""Post creation."""

from backend.app.models.post import Post
from backend.app.models.post_schemas import PostDTO
from backend.app.services.post_repository import PostRepository


def create_post(repository: PostRepository, dto: PostDTO) -> Post:
    """Insert one post built from an already validated *dto*.

    :class:`~backend.app.core.errors.StorageError` from the repository
    propagates unchanged; there is no retry.
    """
    return repository.insert(title=dto.title, content=dto.content, price=dto.price)
