"""Actionable error guidance for common failure scenarios."""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class ErrorGuidance:
    """Structured error guidance with checks and suggestions."""

    title: str
    checks: list[str]  # Things to check
    fixes: list[str]  # How to fix
    examples: list[str] | None = None  # Example commands


class GuidanceProvider:
    """Provides context-aware guidance for errors."""

    @staticmethod
    def get_migration_failed(version: int, error: str, backup_path: Path | None = None) -> ErrorGuidance:
        """Guidance when a schema migration fails."""
        checks = [
            f"The database was left at schema version {version - 1}",
            "Free disk space: df -h",
        ]

        fixes = []

        if "locked" in error.lower() or "busy" in error.lower():
            fixes.extend(
                [
                    "Close any other program that has the database open",
                    "Restart the application to retry the migration",
                ]
            )
        elif "malformed" in error.lower() or "not a database" in error.lower():
            fixes.append("The database file is damaged; restore it from a backup")
        else:
            fixes.append("Restart the application to retry from the last completed migration")

        examples = None
        if backup_path is not None:
            fixes.append(f"Restore the pre-migration backup: {backup_path}")
            examples = [f"cp {backup_path} <database file>"]

        return ErrorGuidance(
            title=f"Database migration {version} failed",
            checks=checks,
            fixes=fixes,
            examples=examples,
        )

    @staticmethod
    def get_store_unreadable(path: str, error: str) -> ErrorGuidance:
        """Guidance when the database file cannot be opened or read."""
        checks = [f"File exists and is readable: ls -l {path}"]
        if "not a database" in error.lower() or "malformed" in error.lower():
            checks.append(f"File is a SQLite database: file {path}")
            fixes = [
                "Restore the most recent *_backup_* file next to the database",
                "Or move the damaged file aside to start with an empty database",
            ]
        else:
            fixes = [
                "Close any other program that has the database open",
                f"Fix permissions: chmod u+rw {path}",
            ]

        return ErrorGuidance(title="Could not open the encounter database", checks=checks, fixes=fixes)

    @staticmethod
    def get_store_too_new(current_version: int, latest_version: int) -> ErrorGuidance:
        """Guidance when the database was written by a newer release."""
        return ErrorGuidance(
            title=f"Database schema v{current_version} is newer than this release (v{latest_version})",
            checks=["Which release last opened this database"],
            fixes=[
                "Update the application to the latest release",
                "Downgrading the database schema is not supported",
            ],
        )

    @staticmethod
    def get_permission_denied(path: str, operation: str = "access") -> ErrorGuidance:
        """Guidance for permission errors."""
        return ErrorGuidance(
            title=f"Permission denied for {operation}",
            checks=[
                f"Check file permissions: ls -ld {path}",
                f"Check ownership: ls -l {path}",
            ],
            fixes=[
                f"Fix permissions: chmod u+rw {path}",
                f"Fix ownership: sudo chown $USER {path}",
            ],
            examples=[f"ls -la {path}"],
        )

    @staticmethod
    def get_disk_space_full(path: str) -> ErrorGuidance:
        """Guidance when disk is full."""
        return ErrorGuidance(
            title="No space left on device",
            checks=[
                "Check disk space: df -h",
                f"Check directory size: du -sh {path}",
            ],
            fixes=[
                "Free up disk space by removing unnecessary files",
                f"Remove old database backups: rm {path}/*_backup_*",
            ],
        )

    @staticmethod
    def format_guidance(guidance: ErrorGuidance) -> str:
        """Format guidance as rich-compatible string."""
        lines = [f"[bold yellow]{guidance.title}[/bold yellow]\n"]

        if guidance.checks:
            lines.append("[cyan]Checks:[/cyan]")
            for check in guidance.checks:
                lines.append(f"  • {check}")
            lines.append("")

        if guidance.fixes:
            lines.append("[cyan]How to fix:[/cyan]")
            for fix in guidance.fixes:
                lines.append(f"  • {fix}")
            lines.append("")

        if guidance.examples:
            lines.append("[cyan]Try these commands:[/cyan]")
            for example in guidance.examples:
                lines.append(f"  $ {example}")

        return "\n".join(lines)
