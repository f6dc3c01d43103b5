# cavelauncher package
# Launch pipeline for locally installed titles ("caves"): repair check,
# manifest resolution, launch type classification, subkeys, prerequisites,
# launcher dispatch and playtime tracking.

__version__ = "0.4.0"
