"""fleetdock: развёртывание образа на парке Docker-хостов."""

__version__ = "0.3.0"
