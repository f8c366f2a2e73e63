"""Shared helpers; not a provider."""


def dsn(driver):
    return f"{driver}://localhost/test"
