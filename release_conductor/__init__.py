"""release-conductor: tag-triggered release automation.

Pushing a ``release-v<version>`` tag requests a release. release-conductor
validates the request, bumps the version on the release branch, builds,
signs and publishes the artifacts, and finally removes the trigger tag.
"""

__version__ = "0.1.0"
