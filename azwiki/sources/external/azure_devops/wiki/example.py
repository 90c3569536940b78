# ruff: noqa
"""
Azure DevOps Wiki API Usage Examples

This example demonstrates how to use the WikiDataSource to:
- List the wikis of a project
- Create a page, then edit it with the etag returned by the create
- Read the raw page content back

Prerequisites:
- Set AZURE_DEVOPS_ORG_URL environment variable (e.g., https://dev.azure.com/contoso)
- Set AZURE_DEVOPS_PROJECT environment variable
- Set AZURE_DEVOPS_PAT environment variable
- Optionally set AZURE_DEVOPS_WIKI (defaults to the first wiki of the project)
"""

import asyncio
import logging
import os

from azwiki.config.settings import get_settings
from azwiki.exceptions.wiki_exceptions import WikiClientError
from azwiki.sources.client.azure_devops.azure_devops import AzureDevOpsClient
from azwiki.sources.external.azure_devops.wiki.wiki import WikiDataSource


async def main() -> None:
    """Simple example of using WikiDataSource to call the API."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    try:
        client = AzureDevOpsClient.build_from_settings(settings)
    except ValueError as e:
        print(f"Error: Failed to initialize Azure DevOps client.")
        print(f"Details: {e}")
        return

    data_source = WikiDataSource(client)
    try:
        print("\nList wikis:")
        wikis = await data_source.get_wikis()
        for wiki in wikis.value:
            print(f"  {wiki.name} ({wiki.type})")
        if not wikis.value:
            return

        wiki_identifier = os.getenv("AZURE_DEVOPS_WIKI") or wikis.value[0].id

        print("\nCreate page:")
        page = await data_source.create_or_update_page(
            wiki_identifier, "/Sandbox/Example", "# Example\n", comment="created from example"
        )
        print(f"  {page.path} id={page.id} etag={page.e_tag}")

        print("\nEdit page with the returned etag:")
        page = await data_source.update_page_by_id(
            wiki_identifier, page.id, "# Example\n\nedited\n", e_tag=page.e_tag
        )
        print(f"  etag={page.e_tag}")

        print("\nRaw content:")
        print(await data_source.get_page_content(wiki_identifier, page.id))

        await data_source.delete_page_by_id(wiki_identifier, page.id, comment="example cleanup")
    except WikiClientError as e:
        print(f"Error: {e}")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
