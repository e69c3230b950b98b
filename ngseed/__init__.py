"""ngseed -- scaffold a new Angular project from a git boilerplate.

The provisioning pipeline clones a boilerplate repository, checks that it is
an Angular workspace, substitutes the project-name and component-prefix
placeholders, merges a base lint configuration, installs dependencies and
starts a fresh git history.

Quick usage::

    from ngseed import Pipeline, ProjectParams, ScaffoldConfig

    config = ScaffoldConfig()
    params = ProjectParams(name="demo", prefix="dm", template=config.template_url)
    result = await Pipeline(config).run(params)
"""

__version__ = "0.1.0"

from ngseed.config import InstallConfig, LintConfig, ProjectParams, ScaffoldConfig
from ngseed.errors import ScaffoldError
from ngseed.pipeline import Pipeline, PipelineResult, Stage

__all__ = [
    "__version__",
    "InstallConfig",
    "LintConfig",
    "Pipeline",
    "PipelineResult",
    "ProjectParams",
    "ScaffoldConfig",
    "ScaffoldError",
    "Stage",
]
