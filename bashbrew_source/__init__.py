"""
bashbrew-source resolves Docker image names into the git location of the
Dockerfiles that build them, using a local mirror of a bashbrew library
repository (e.g. docker-library/official-images).

Example usage:

```python
from bashbrew_source import DockerFileSource, DockerFileSourceConfig
from bashbrew_source.fetcher import GitDockerFileFetcher
from bashbrew_source.image import parse_image_name

config = DockerFileSourceConfig(
    workspace="/var/cache/bashbrew",
    mirror_url="https://github.com/docker-library/official-images.git",
)
source = DockerFileSource(config, GitDockerFileFetcher(config.workspace))
for dockerfile in await source.fetch_dockerfile(parse_image_name("library/alpine:3.18")):
    print(dockerfile.entry.url, dockerfile.from_image)
```
"""

from .config import DockerFileSourceConfig
from .source import DockerFileSource

__all__ = [
    "DockerFileSource",
    "DockerFileSourceConfig",
    "cache",
    "exceptions",
    "fetcher",
    "image",
    "library",
    "mirror",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
