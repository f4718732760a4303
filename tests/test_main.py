"""Main test module for mail-register."""

import importlib

import mail_register


class TestVersion:
    """Test version information."""

    def test_version_exists(self) -> None:
        """Verifies that version string is defined in package.

        Business context:
        Version information is required for package distribution and
        user troubleshooting (mail-register --version).

        Assertion Strategy:
        Validates version is not None.
        """
        assert mail_register.__version__ is not None

    def test_version_format(self) -> None:
        """Verifies version follows semantic versioning format.

        Arrangement:
        None - tests package-level attribute.

        Action:
        Parse version string and validate components.

        Assertion Strategy:
        Validates 3 parts, all numeric.
        """
        parts = mail_register.__version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)

    def test_title_matches_import_name(self) -> None:
        """Package title is the import name."""
        assert mail_register.__title__ == "mail_register"

    def test_all_exports_metadata(self) -> None:
        """Every name in __all__ is available on the package."""
        for name in mail_register.__all__:
            assert hasattr(mail_register, name)

    def test_no_project_url_published(self) -> None:
        """No homepage URL is advertised until the project has one."""
        version_module = importlib.import_module("mail_register.__version__")

        assert "__url__" not in mail_register.__all__
        assert not hasattr(version_module, "__url__")


class TestMainModule:
    """Tests for python -m mail_register."""

    def test_main_module_exposes_cli_main(self) -> None:
        """__main__ re-exports the CLI entry point."""
        from mail_register import __main__
        from mail_register.cli import main

        assert __main__.main is main
