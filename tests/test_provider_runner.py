import allure
from click.testing import CliRunner

from provider_runner import __version__
from provider_runner.main import provider_runner

pytestmark = [
    allure.epic("Provider Runtime"),
    allure.feature("CLI"),
]


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(provider_runner, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
