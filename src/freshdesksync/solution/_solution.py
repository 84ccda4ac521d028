import collections.abc
import enum
import typing

from pydantic import BaseModel, ConfigDict, Field


API_PREFIX = '/api/v2/solutions'
"""Path prefix shared by all Freshdesk Solutions endpoints."""


class SolutionEntity(enum.Enum):
    """
    An enumeration of the Freshdesk Solutions entity types that can carry
    translations.

    Each member's value is the name of the REST collection the entity lives
    in, e.g. `categories` for `/api/v2/solutions/categories`.
    """
    CATEGORY = 'categories'
    """A solution category, the top level of the knowledge base."""
    FOLDER = 'folders'
    """A solution folder, contained in a category or a parent folder."""
    ARTICLE = 'articles'
    """A solution article, contained in a folder."""

    @property
    def collection_path(self) -> str:
        """Absolute path of the entity collection."""
        return f'{API_PREFIX}/{self.value}'

    def translation_path(
        self, entity_id: typing.Union[int, str], locale: str
    ) -> str:
        """
        Get the path of the translation resource of an entity.

        Args:
            entity_id (int | str): The Freshdesk ID of the entity.
            locale (str): The locale code, like 'en' or 'fr'.

        Returns:
            str: The path, like `/api/v2/solutions/articles/42/fr`.
        """
        return f'{self.collection_path}/{entity_id}/{locale}'


class SolutionModel(BaseModel):
    """
    Base for the typed views of Freshdesk Solutions documents.

    Only the documented fields are typed. Unknown fields returned by the API
    are kept as extra attributes, so a model can be dumped back without
    losing data.
    """
    model_config = ConfigDict(extra='allow')

    id: int = Field(frozen=True)
    """The Freshdesk ID of the entity."""
    created_at: typing.Optional[str] = None
    """The creation date of the entity."""
    updated_at: typing.Optional[str] = None
    """The last update date of the entity."""


class Category(SolutionModel):
    """A Freshdesk Solutions category."""
    name: str = ''
    description: typing.Optional[str] = None
    visible_in_portals: list[int] = Field(default_factory=list)
    """The portals where the category is visible."""


class Folder(SolutionModel):
    """A Freshdesk Solutions folder."""
    name: str = ''
    description: typing.Optional[str] = None
    parent_folder_id: typing.Optional[int] = None
    hierarchy: list[dict[str, typing.Any]] = Field(default_factory=list)
    """Parent category and folders in which the folder is placed."""
    articles_count: int = 0
    sub_folders_count: int = 0
    visibility: typing.Optional[int] = None
    """The visibility code of the folder."""
    company_ids: list[int] = Field(default_factory=list)
    contact_segment_ids: list[int] = Field(default_factory=list)
    company_segment_ids: list[int] = Field(default_factory=list)


class Article(SolutionModel):
    """A Freshdesk Solutions article."""
    agent_id: typing.Optional[int] = None
    """The ID of the agent who authored the article."""
    category_id: typing.Optional[int] = None
    folder_id: typing.Optional[int] = None
    title: str = ''
    description: typing.Optional[str] = None
    """The contents of the article as HTML."""
    description_text: typing.Optional[str] = None
    """The contents of the article as plain text."""
    hierarchy: list[dict[str, typing.Any]] = Field(default_factory=list)
    hits: int = 0
    status: typing.Optional[int] = None
    """The status code of the article (1 for draft, 2 for published)."""
    seo_data: typing.Any = None
    tags: list[str] = Field(default_factory=list)
    thumbs_down: int = 0
    thumbs_up: int = 0


EntityRef = typing.Union[
    SolutionModel, typing.Mapping[str, typing.Any], int, str
]
"""A reference to an entity: a model, a raw JSON document or a bare ID."""


def get_entity_id(entity: EntityRef) -> typing.Union[int, str]:
    """
    Extract the Freshdesk ID from an entity reference.

    Args:
        entity (EntityRef): A model instance, a mapping with an `id` key
            or the ID itself.

    Returns:
        int | str: The entity ID.

    Raises:
        ValueError: If a mapping has no `id` key.
        TypeError: If the reference is of an unsupported type.
    """
    if isinstance(entity, SolutionModel):
        return entity.id
    if isinstance(entity, collections.abc.Mapping):
        if 'id' not in entity:
            raise ValueError('Entity document has no "id" key.')
        return entity['id']
    # bool is an int subclass but never a valid ID
    if isinstance(entity, (int, str)) and not isinstance(entity, bool):
        return entity
    raise TypeError(f'Unsupported entity reference type "{type(entity)}".')


def get_folders_path(category: EntityRef) -> str:
    """Path listing the folders of a category."""
    category_id = get_entity_id(category)
    return f'{SolutionEntity.CATEGORY.collection_path}/{category_id}/folders'


def get_articles_path(folder: EntityRef) -> str:
    """Path listing the articles of a folder."""
    folder_id = get_entity_id(folder)
    return f'{SolutionEntity.FOLDER.collection_path}/{folder_id}/articles'
