"""`freshdesksync.solution` package provides typed views of Freshdesk
Solutions documents (categories, folders and articles) and the REST paths
of the entities that carry translations.
"""

from ._solution import (
    API_PREFIX,
    Article,
    Category,
    EntityRef,
    Folder,
    SolutionEntity,
    SolutionModel,
    get_articles_path,
    get_entity_id,
    get_folders_path,
)

__all__ = [
    'API_PREFIX',
    'Article',
    'Category',
    'EntityRef',
    'Folder',
    'SolutionEntity',
    'SolutionModel',
    'get_articles_path',
    'get_entity_id',
    'get_folders_path',
]
