"""Project component detection.

A component is a directory holding a language manifest. Only the scanned
root and its immediate subdirectories are inspected, which covers single
projects and the common ``packages/`` style layouts one level deep.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.interfaces import FileSystem
from .practices.types import (
    ProgrammingLanguage,
    ProjectComponent,
    ProjectComponentFramework,
    ProjectComponentPlatform,
    ProjectComponentType,
)

logger = logging.getLogger(__name__)

IGNORED_DIRECTORIES = {"node_modules", "vendor", "dist", "build", "venv", "__pycache__"}

PYTHON_MANIFESTS = ("pyproject.toml", "setup.py", "setup.cfg", "requirements.txt", "Pipfile")
GO_MANIFESTS = ("go.mod",)
JAVA_MANIFESTS = ("pom.xml", "build.gradle", "build.gradle.kts")

# Checked in order; the first dependency present wins.
FRAMEWORK_DEPENDENCIES = (
    ("next", ProjectComponentFramework.NEXT, ProjectComponentPlatform.FRONTEND),
    ("react", ProjectComponentFramework.REACT, ProjectComponentPlatform.FRONTEND),
    ("vue", ProjectComponentFramework.VUE, ProjectComponentPlatform.FRONTEND),
    ("@angular/core", ProjectComponentFramework.ANGULAR, ProjectComponentPlatform.FRONTEND),
    ("express", ProjectComponentFramework.EXPRESS, ProjectComponentPlatform.BACKEND),
)


def detect_components(
    root: Path,
    fs: FileSystem,
    repository_path: Optional[str] = None,
) -> List[ProjectComponent]:
    """Return the components found at ``root`` and one level below it."""

    candidates = [root]
    for child in fs.list_directory(root):
        if child.name.startswith(".") or child.name in IGNORED_DIRECTORIES:
            continue
        if fs.is_directory(child):
            candidates.append(child)

    components: List[ProjectComponent] = []
    for directory in candidates:
        found = _detect_directory(directory, fs, repository_path)
        for component in found:
            logger.debug("Detected %s component at %s", component.language.value, component.path)
        components.extend(found)

    if not components:
        logger.info("No language manifests found under %s", root)
        components.append(
            ProjectComponent(
                language=ProgrammingLanguage.UNKNOWN,
                path=str(root),
                repository_path=repository_path,
            )
        )
    return components


def _detect_directory(
    directory: Path,
    fs: FileSystem,
    repository_path: Optional[str],
) -> List[ProjectComponent]:
    found: List[ProjectComponent] = []

    if fs.file_exists(directory / "package.json"):
        found.append(_javascript_component(directory, fs, repository_path))

    for language, manifests in (
        (ProgrammingLanguage.PYTHON, PYTHON_MANIFESTS),
        (ProgrammingLanguage.GO, GO_MANIFESTS),
        (ProgrammingLanguage.JAVA, JAVA_MANIFESTS),
    ):
        if any(fs.file_exists(directory / manifest) for manifest in manifests):
            found.append(
                ProjectComponent(
                    language=language,
                    path=str(directory),
                    platform=ProjectComponentPlatform.BACKEND,
                    repository_path=repository_path,
                )
            )
    return found


def _read_package_json(directory: Path, fs: FileSystem) -> Dict[str, Any]:
    content = fs.read_file(directory / "package.json")
    if content is None:
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid package.json in %s: %s", directory, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _javascript_component(
    directory: Path,
    fs: FileSystem,
    repository_path: Optional[str],
) -> ProjectComponent:
    package = _read_package_json(directory, fs)
    dependencies: Dict[str, Any] = {}
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        value = package.get(section)
        if isinstance(value, dict):
            dependencies.update(value)

    language = ProgrammingLanguage.JAVASCRIPT
    if fs.file_exists(directory / "tsconfig.json") or "typescript" in dependencies:
        language = ProgrammingLanguage.TYPESCRIPT

    framework = ProjectComponentFramework.UNKNOWN
    platform = ProjectComponentPlatform.UNKNOWN
    for dependency, candidate, candidate_platform in FRAMEWORK_DEPENDENCIES:
        if dependency in dependencies:
            framework, platform = candidate, candidate_platform
            break

    if framework is ProjectComponentFramework.UNKNOWN and ("main" in package or "exports" in package):
        component_type = ProjectComponentType.LIBRARY
    else:
        component_type = ProjectComponentType.APPLICATION

    return ProjectComponent(
        language=language,
        path=str(directory),
        framework=framework,
        platform=platform,
        type=component_type,
        repository_path=repository_path,
    )
