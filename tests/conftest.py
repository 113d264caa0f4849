import pytest
from click.testing import CliRunner

from literate_listing.config import build_comment_pattern


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def slash_pattern():
    """Default `//` prose matcher."""
    return build_comment_pattern("//")
