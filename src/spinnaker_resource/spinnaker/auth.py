import abc
import os
import ssl
import tempfile
from urllib.parse import parse_qs, urlsplit
from enum import StrEnum

import aiohttp
from sanic.log import logger

from spinnaker_resource.config import Config
from spinnaker_resource.exceptions import AuthError, ConfigurationError


class AuthMethod(StrEnum):
    ldap = "ldap"
    x509 = "x509"

    @classmethod
    def parse(cls, tag: str) -> "AuthMethod":
        try:
            return cls(tag.lower())
        except ValueError:
            raise ConfigurationError("auth_method must be set") from None


class AuthProvider(abc.ABC):
    """Builds an aiohttp session that is authenticated against the Gate API."""

    @abc.abstractmethod
    async def get_client(self, base_url: str) -> aiohttp.ClientSession: ...


class LdapAuthClient(AuthProvider):
    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    async def get_client(self, base_url: str) -> aiohttp.ClientSession:
        if not self.username or not self.password:
            raise AuthError("ldap_username and ldap_password must be set")

        # Gate keeps the login in a session cookie
        session = aiohttp.ClientSession(cookie_jar=aiohttp.CookieJar(unsafe=True))
        try:
            logger.debug("Logging in to %s as %s", f"{base_url}/login", self.username)
            async with session.post(
                f"{base_url}/login",
                data={"username": self.username, "password": self.password},
                allow_redirects=False,
            ) as resp:
                if resp.status >= 400:
                    raise AuthError(
                        f"ldap login failed with status code: {resp.status}"
                    )
                # a rejected form login redirects back to /login?error
                location = resp.headers.get("Location", "")
                query = parse_qs(urlsplit(location).query, keep_blank_values=True)
                if "error" in query:
                    raise AuthError(f"ldap login rejected, redirected to {location}")
        except Exception:
            await session.close()
            raise
        return session


class X509AuthClient(AuthProvider):
    def __init__(self, cert: str, key: str):
        self.cert = cert
        self.key = key

    def ssl_context(self) -> ssl.SSLContext:
        if not self.cert or not self.key:
            raise AuthError("x509_cert and x509_key must be set")

        context = ssl.create_default_context()
        # load_cert_chain only reads from files
        with tempfile.TemporaryDirectory() as tmpdir:
            cert_path = os.path.join(tmpdir, "client.crt")
            key_path = os.path.join(tmpdir, "client.key")
            with open(cert_path, "w") as f:
                f.write(self.cert)
            with open(key_path, "w") as f:
                f.write(self.key)
            try:
                context.load_cert_chain(cert_path, key_path)
            except ssl.SSLError as e:
                raise AuthError(f"invalid x509 certificate or key: {e}") from e
        return context

    async def get_client(self, base_url: str) -> aiohttp.ClientSession:
        context = self.ssl_context()
        logger.debug("Using x509 client certificate for %s", base_url)
        return aiohttp.ClientSession(connector=aiohttp.TCPConnector(ssl=context))


def auth_provider_for(config: Config) -> AuthProvider:
    method = AuthMethod.parse(config.AUTH_METHOD)
    if method is AuthMethod.ldap:
        return LdapAuthClient(config.LDAP_USERNAME, config.LDAP_PASSWORD)
    return X509AuthClient(config.X509_CERT, config.X509_KEY)
