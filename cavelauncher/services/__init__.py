# Services package
from .configure_service import ConfigureService
from .diagnostics import DiagnosticsReporter
from .launch_service import LaunchService
