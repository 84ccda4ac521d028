"""This example demonstrates how to walk the knowledge base and push
a translation for every category, folder and article, stopping as soon as
the API rate limit is reached.
"""

import logging
import os

from freshdesksync import (
    Article,
    Category,
    Folder,
    FreshdeskClient,
    TranslationResult,
)


BASE_URL = os.environ.get('FRESHDESK_URL', 'https://example.freshdesk.com')
API_KEY = os.environ.get('FRESHDESK_API_KEY', '')
LOCALE = 'fr'


def report(
    client: FreshdeskClient, result: TranslationResult, name: str
) -> bool:
    """Print the outcome of an update and tell whether to keep going."""
    if result.is_skipped:
        print(f'Rate limited before "{name}", stopping.')
        return False
    if result.is_failed:
        print(f'Failed to translate "{name}": {result.error}')
        # a 429 trips the breaker, any other failure only skips this item
        return not client.is_rate_limited
    print(f'Translated "{name}"')
    return True


async def sync_folder(client: FreshdeskClient, folder: Folder) -> bool:
    result = await client.update_folder_translation(
        folder.id, LOCALE, {'name': folder.name}, raise_on_error=False
        )
    if not report(client, result, folder.name):
        return False
    for data in await client.list_articles(folder):
        article = Article.model_validate(data)
        result = await client.update_article_translation(
            article.id,
            LOCALE,
            {'title': article.title, 'description': article.description},
            raise_on_error=False
            )
        if not report(client, result, article.title):
            return False
    return True


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    async with FreshdeskClient(BASE_URL, API_KEY) as client:
        for data in await client.list_categories():
            category = Category.model_validate(data)
            result = await client.update_category_translation(
                category.id, LOCALE, {'name': category.name},
                raise_on_error=False
                )
            if not report(client, result, category.name):
                break
            for folder_data in await client.list_folders(category):
                folder = Folder.model_validate(folder_data)
                if not await sync_folder(client, folder):
                    break
            if client.is_rate_limited:
                break
        if client.is_rate_limited:
            print(f'Retry after: {client.retry_after or "unknown"} seconds')


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
