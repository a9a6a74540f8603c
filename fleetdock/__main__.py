"""python -m fleetdock."""

from fleetdock.main import run

run()
