import subprocess
import unittest
from unittest import mock

import run_migration


class TestRunMigration(unittest.TestCase):
    def test_defaults_to_upgrade_head(self) -> None:
        self.assertEqual(run_migration.alembic_command([]), ["alembic", "upgrade", "head"])

    def test_passes_arguments_through(self) -> None:
        self.assertEqual(run_migration.alembic_command(["downgrade", "-1"]), ["alembic", "downgrade", "-1"])

    @mock.patch.dict("os.environ", {"DATABASE_URL": "sqlite+aiosqlite://"})
    @mock.patch("run_migration.subprocess.run")
    def test_runs_alembic_from_the_backend_directory(self, run) -> None:
        run.return_value = subprocess.CompletedProcess(["alembic"], 0, stdout="ok", stderr="")

        with mock.patch("builtins.print"):
            code = run_migration.main(["downgrade", "-1"])

        self.assertEqual(code, 0)
        args, kwargs = run.call_args
        self.assertEqual(args[0], ["alembic", "downgrade", "-1"])
        self.assertEqual(kwargs["cwd"], run_migration.BACKEND_DIR)

    @mock.patch.dict("os.environ", {"DATABASE_URL": "sqlite+aiosqlite://"})
    @mock.patch("run_migration.subprocess.run")
    def test_failure_exit_code(self, run) -> None:
        run.side_effect = subprocess.CalledProcessError(1, ["alembic"], stderr="boom")

        with mock.patch("builtins.print"):
            self.assertEqual(run_migration.main([]), 1)


if __name__ == "__main__":
    unittest.main()
