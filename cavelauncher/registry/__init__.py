# Registry package
from .caves_registry import Cave, CavesRegistry, CAVES, get_registry
