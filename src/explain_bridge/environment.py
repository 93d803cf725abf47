"""Runtime environment provisioning for pickled models.

Pickles are version sensitive: a model has to be loaded with the same Python
minor version and library versions it was dumped with. This module recreates or
activates the matching conda / virtual environment before deserialization.
"""

import importlib
import json
import os
import re
import shutil
import site
import subprocess
import sys
from pathlib import Path
from typing import Callable

import structlog
import yaml

from explain_bridge.exceptions import EnvironmentMismatchError, EnvironmentProvisioningError

logger = structlog.get_logger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

_PYTHON_DIR = re.compile(r"^python(\d+)\.(\d+)$")


def find_site_packages(prefix: str | Path) -> Path:
    """Locate the site-packages directory of an environment prefix.

    Args:
        prefix: Root directory of a conda env or virtualenv.

    Returns:
        Path to site-packages.

    Raises:
        EnvironmentProvisioningError: If no site-packages directory exists.
    """
    prefix = Path(prefix)
    windows_layout = prefix / "Lib" / "site-packages"
    if windows_layout.is_dir():
        return windows_layout

    candidates = sorted((prefix / "lib").glob("python*/site-packages"))
    if not candidates:
        raise EnvironmentProvisioningError(
            f"No site-packages directory found under {prefix}",
            {"prefix": str(prefix)},
        )
    return candidates[-1]


def check_python_version(site_packages: Path) -> None:
    """Fail when an environment targets a different Python minor version."""
    match = _PYTHON_DIR.match(site_packages.parent.name)
    if match is None:
        return

    env_version = (int(match.group(1)), int(match.group(2)))
    current = sys.version_info[:2]
    if env_version != current:
        raise EnvironmentMismatchError(
            f"Environment targets Python {env_version[0]}.{env_version[1]} "
            f"but the running interpreter is {current[0]}.{current[1]}",
            {"site_packages": str(site_packages), "env_version": env_version},
        )


def activate(prefix: str | Path) -> Path:
    """Put an environment's site-packages in front of ``sys.path``.

    Args:
        prefix: Root directory of the environment.

    Returns:
        The activated site-packages directory.
    """
    site_packages = find_site_packages(prefix)
    check_python_version(site_packages)

    entry = str(site_packages)
    if entry in sys.path:
        logger.info("Environment already active", site_packages=entry)
        return site_packages

    before = list(sys.path)
    site.addsitedir(entry)
    added = [p for p in sys.path if p not in before]
    sys.path[:] = added + before
    importlib.invalidate_caches()

    logger.info("Environment activated", prefix=str(prefix), site_packages=entry)
    return site_packages


class EnvironmentProvisioner:
    """Recreates or activates the environment a model was pickled in.

    Example:
        provisioner = EnvironmentProvisioner()
        provisioner.prepare(yml="environment.yml")
    """

    def __init__(self, runner: Runner = subprocess.run) -> None:
        self._run = runner

    def prepare(
        self,
        yml: str | Path | None = None,
        condaenv: str | None = None,
        env: str | Path | None = None,
    ) -> Path | None:
        """Make a matching runtime available for deserialization.

        Args:
            yml: Conda environment descriptor. The env is created from it unless
                an env with the same name already exists.
            condaenv: With ``yml``, the conda installation root. Without it, the
                name of an existing conda env to activate.
            env: Path to a virtual environment.

        Returns:
            Activated site-packages path, or None when nothing was requested.
        """
        if yml is not None:
            conda = self._conda_executable(condaenv)
            prefix = self._ensure_from_yml(conda, Path(yml))
        elif condaenv is not None:
            conda = self._conda_executable(None)
            prefix = self._lookup_env(conda, condaenv)
        elif env is not None:
            prefix = Path(env)
            if not prefix.is_dir():
                raise EnvironmentProvisioningError(
                    f"Virtual environment not found: {prefix}", {"env": str(prefix)}
                )
        else:
            logger.debug("No environment requested, using current interpreter")
            return None

        return activate(prefix)

    def _conda_executable(self, conda_root: str | None) -> str:
        if conda_root:
            root = Path(conda_root)
            for candidate in (
                root / "bin" / "conda",
                root / "condabin" / "conda",
                root / "Scripts" / "conda.exe",
            ):
                if candidate.exists():
                    return str(candidate)
            raise EnvironmentProvisioningError(
                f"conda executable not found under {root}",
                {"condaenv": str(root)},
            )

        conda = os.environ.get("CONDA_EXE") or shutil.which("conda")
        if conda is None:
            raise EnvironmentProvisioningError(
                "conda executable not found. If OS is Windows conda has to be added to the PATH first",
                {"suggestion": "Install conda or pass its installation root as condaenv"},
            )
        return conda

    def _conda(self, conda: str, *args: str) -> str:
        cmd = [conda, *args]
        logger.debug("Running conda", cmd=" ".join(cmd))
        try:
            result = self._run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            raise EnvironmentProvisioningError(
                f"conda command failed: {' '.join(cmd)}",
                {"returncode": e.returncode, "stderr": e.stderr},
            ) from e
        return result.stdout

    def list_envs(self, conda: str) -> dict[str, Path]:
        """Map conda environment names to their prefixes."""
        payload = json.loads(self._conda(conda, "env", "list", "--json"))
        envs: dict[str, Path] = {}
        for raw in payload.get("envs", []):
            prefix = Path(raw)
            name = prefix.name if prefix.parent.name == "envs" else "base"
            envs.setdefault(name, prefix)
        return envs

    def _lookup_env(self, conda: str, name: str) -> Path:
        envs = self.list_envs(conda)
        if name not in envs:
            raise EnvironmentProvisioningError(
                f"Conda environment '{name}' not found",
                {"available": sorted(envs)},
            )
        return envs[name]

    def _ensure_from_yml(self, conda: str, yml: Path) -> Path:
        if not yml.exists():
            raise EnvironmentProvisioningError(
                f"Environment file not found: {yml}", {"yml": str(yml)}
            )

        with open(yml) as f:
            descriptor = yaml.safe_load(f) or {}

        name = descriptor.get("name")
        if not name:
            raise EnvironmentProvisioningError(
                f"Environment file {yml} has no 'name' entry", {"yml": str(yml)}
            )

        envs = self.list_envs(conda)
        if name in envs:
            logger.warning(
                "Conda environment already exists, activating it without changes",
                name=name,
                prefix=str(envs[name]),
            )
            return envs[name]

        logger.info("Creating conda environment", name=name, yml=str(yml))
        self._conda(conda, "env", "create", "-f", str(yml))
        return self._lookup_env(conda, name)


def prepare_env(
    yml: str | Path | None = None,
    condaenv: str | None = None,
    env: str | Path | None = None,
) -> Path | None:
    """Prepare the runtime environment with the default provisioner."""
    return EnvironmentProvisioner().prepare(yml=yml, condaenv=condaenv, env=env)
