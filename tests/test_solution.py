import pytest

from freshdesksync.solution import (
    Article,
    Category,
    Folder,
    SolutionEntity,
    get_articles_path,
    get_entity_id,
    get_folders_path,
)


@pytest.fixture
def article_data():
    return {
        'id': 42,
        'agent_id': 7,
        'category_id': 1,
        'folder_id': 10,
        'title': 'Getting started',
        'description': '<p>Hello</p>',
        'description_text': 'Hello',
        'hierarchy': [{'level': 0, 'type': 'category', 'data': {'id': 1}}],
        'hits': 12,
        'status': 2,
        'seo_data': {'meta_title': 'Start'},
        'tags': ['intro'],
        'thumbs_down': 0,
        'thumbs_up': 3,
        'created_at': '2024-01-01T00:00:00Z',
        'updated_at': '2024-01-02T00:00:00Z',
        'type': 1,
        }


def test_article_from_json(article_data):
    article = Article.model_validate(article_data)
    assert article.id == 42
    assert article.title == 'Getting started'
    assert article.tags == ['intro']
    assert article.model_extra == {'type': 1}
    assert article.model_dump() == article_data


def test_category_defaults():
    category = Category(id=1)
    assert category.name == ''
    assert category.description is None
    assert category.visible_in_portals == []


def test_folder_from_json():
    folder = Folder.model_validate(
        {'id': 10, 'name': 'Docs', 'articles_count': 4, 'visibility': 1}
        )
    assert folder.articles_count == 4
    assert folder.sub_folders_count == 0
    assert folder.company_ids == []


def test_id_immutable():
    category = Category(id=1, name='FAQ')
    with pytest.raises(ValueError):
        category.id = 2
    category.name = 'Questions'
    assert category.name == 'Questions'


def test_id_required():
    with pytest.raises(ValueError):
        Category.model_validate({'name': 'FAQ'})


@pytest.mark.parametrize(
    'entity, expected',
    [
        (1, 1),
        ('1', '1'),
        ({'id': 5, 'name': 'x'}, 5),
        (Category(id=6), 6),
        (Folder(id=7), 7),
    ]
)
def test_get_entity_id(entity, expected):
    assert get_entity_id(entity) == expected


def test_get_entity_id_invalid():
    with pytest.raises(ValueError):
        get_entity_id({'name': 'no id'})
    with pytest.raises(TypeError):
        get_entity_id(True)
    with pytest.raises(TypeError):
        get_entity_id(None)


@pytest.mark.parametrize(
    'entity, path',
    [
        (SolutionEntity.CATEGORY, '/api/v2/solutions/categories/3/fr'),
        (SolutionEntity.FOLDER, '/api/v2/solutions/folders/3/fr'),
        (SolutionEntity.ARTICLE, '/api/v2/solutions/articles/3/fr'),
    ]
)
def test_translation_path(entity, path):
    assert entity.translation_path(3, 'fr') == path


def test_listing_paths():
    assert SolutionEntity('categories') is SolutionEntity.CATEGORY
    assert SolutionEntity.CATEGORY.collection_path == (
        '/api/v2/solutions/categories'
        )
    assert get_folders_path({'id': 2}) == (
        '/api/v2/solutions/categories/2/folders'
        )
    assert get_articles_path(Folder(id=8)) == (
        '/api/v2/solutions/folders/8/articles'
        )
