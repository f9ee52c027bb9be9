"""Core generation orchestration for MediaForge.

- **MediaForgeConfig / config**: Configuration management using Pydantic Settings
- **GenerationDispatcher**: Single-flight routing of requests to pipelines
- **pipeline_registry**: Registry of the image, video, edit, and analysis pipelines
- **GalleryStore**: Persisted newest-first result log with quota eviction
- **CredentialResolver**: Local secret or out-of-band credential resolution
- **Studio**: Session object combining all of the above

Architecture Overview
---------------------
1. **Configuration Layer** (config.py)
2. **Backend Layer** (backend.py): google-genai async client bound to one key
3. **Pipeline Layer** (pipelines/): one fixed call sequence per mode
4. **Dispatch Layer** (dispatcher.py): credential, preconditions, routing
5. **Persistence Layer** (storage.py, gallery_store.py, credentials.py)

Usage Example
-------------
    from mediaforge.core import Studio, config
    from mediaforge.core.models import GenerationConfig, GenerationType

    studio = Studio(config)
    studio.connect("my-api-key")
    item = await studio.generate(GenerationType.IMAGE, "a red fox", GenerationConfig())
"""

from mediaforge.core.config import MediaForgeConfig, config
from mediaforge.core.credentials import CredentialResolver
from mediaforge.core.dispatcher import GenerationDispatcher
from mediaforge.core.gallery_store import GalleryStore
from mediaforge.core.pipelines import pipeline_registry
from mediaforge.core.studio import Studio

__all__ = [
    "CredentialResolver",
    "GalleryStore",
    "GenerationDispatcher",
    "MediaForgeConfig",
    "Studio",
    "config",
    "pipeline_registry",
]
