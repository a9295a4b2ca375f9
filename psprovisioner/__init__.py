"""
psprovisioner - PowerShell Provisioning over a Remote Channel

Provisions a remote Windows machine by uploading PowerShell scripts and
running them, optionally elevated through a scheduled task.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- api: Shared models and collaborator protocols
- encoder: PowerShell -EncodedCommand encoding
- environment: Environment variable assembly
- template: Template rendering and unique ids
- command: Remote command line construction
- elevation: Scheduled-task wrapper for elevated execution
- executor: Script upload, start and retry
- config: Configuration parsing and validation
"""

__version__ = "1.0.0"
