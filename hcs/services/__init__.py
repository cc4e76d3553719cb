"""Build/publish services: manifest, archive, locales, credentials, signing, registry, assets."""
