"""Runner registry mapping artifact types and languages to runners."""
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
from execora.config import Settings, get_settings
from execora.core.enums import RunnerKind
from execora.core.exceptions import NoRunnerAvailableError
from execora.executor.runners.base import Runner
from execora.executor.runners.python_runner import PythonRunner
from execora.executor.runners.javascript_runner import JavaScriptRunner
from execora.executor.runners.html_runner import HTMLRunner
from execora.executor.runners.react_runner import ReactRunner


class RunnerRegistry:
    """
    Read-only table of runners keyed by RunnerKind.

    Artifact types and languages are routed to a RunnerKind through ROUTES.
    Lookup tries the artifact type first, then its language. The table is
    fixed at construction and cannot be extended afterwards.
    """

    ROUTES: Dict[str, RunnerKind] = {
        "python": RunnerKind.PYTHON,
        "python-script": RunnerKind.PYTHON,
        "javascript": RunnerKind.JAVASCRIPT,
        "node-script": RunnerKind.JAVASCRIPT,
        "typescript": RunnerKind.TYPESCRIPT,
        "html": RunnerKind.HTML,
        "html-page": RunnerKind.HTML,
        "react-component": RunnerKind.REACT,
    }

    def __init__(
        self,
        runners: Mapping[RunnerKind, Runner],
        routes: Optional[Mapping[str, RunnerKind]] = None,
    ):
        """
        Initialize registry.

        Args:
            runners: Runner instance for each supported kind
            routes: Type/language key to kind mapping (default: ROUTES)
        """
        self._runners = MappingProxyType(dict(runners))
        self._routes = MappingProxyType(dict(routes if routes is not None else self.ROUTES))

    def resolve(self, artifact_type: str, language: Optional[str] = None) -> Optional[RunnerKind]:
        """
        Find the runner kind for an artifact.

        Args:
            artifact_type: Artifact type (e.g. "python-script")
            language: Artifact language (e.g. "python")

        Returns:
            Optional[RunnerKind]: Kind with a registered runner, None if none matches
        """
        for key in (artifact_type, language):
            kind = self._routes.get(key) if key else None
            if kind is not None and kind in self._runners:
                return kind
        return None

    def get_runner(self, artifact_type: str, language: Optional[str] = None) -> Runner:
        """
        Get the runner for an artifact.

        Args:
            artifact_type: Artifact type
            language: Artifact language

        Returns:
            Runner: Registered runner

        Raises:
            NoRunnerAvailableError: If neither type nor language is routed
        """
        kind = self.resolve(artifact_type, language)
        if kind is None:
            raise NoRunnerAvailableError(
                f"No runner available for type: {artifact_type}, language: {language}"
            )
        return self._runners[kind]

    def has_runner(self, key: str) -> bool:
        """
        Check if a type or language key routes to a registered runner.

        Args:
            key: Artifact type or language

        Returns:
            bool: True if routed, False otherwise
        """
        return self.resolve(key) is not None

    def list_routes(self) -> List[str]:
        """
        List all type/language keys with a registered runner.

        Returns:
            List[str]: Routed keys
        """
        return [key for key, kind in self._routes.items() if kind in self._runners]


def build_default_registry(settings: Optional[Settings] = None) -> RunnerRegistry:
    """
    Build the registry with one instance of every runner.

    Args:
        settings: Application settings

    Returns:
        RunnerRegistry: Registry used by the executor service
    """
    settings = settings or get_settings()
    return RunnerRegistry(
        {
            RunnerKind.PYTHON: PythonRunner(settings),
            RunnerKind.JAVASCRIPT: JavaScriptRunner(settings),
            RunnerKind.TYPESCRIPT: JavaScriptRunner(settings, typescript=True),
            RunnerKind.HTML: HTMLRunner(settings),
            RunnerKind.REACT: ReactRunner(settings),
        }
    )
