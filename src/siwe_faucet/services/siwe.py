"""Sign-In-With-Ethereum (EIP-4361) message construction and parsing.

`SiweMessage.prepare_message` produces exactly the text wallets are asked to
sign; `SiweMessage.parse` is its inverse and rejects anything that does not
follow the line-oriented grammar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from eth_utils import is_checksum_address

from siwe_faucet.core.settings import settings

SIWE_VERSION = "1"

_HEADER_SUFFIX = " wants you to sign in with your Ethereum account:"
_HEADER_RE = re.compile(
    r"^(?:(?P<scheme>[a-zA-Z][a-zA-Z0-9+\-.]*)://)?(?P<domain>[^\s/?#]+)"
    + re.escape(_HEADER_SUFFIX)
    + r"$"
)
_NONCE_RE = re.compile(r"^[a-zA-Z0-9]{8,}$")

URI_TAG = "URI: "
VERSION_TAG = "Version: "
CHAIN_ID_TAG = "Chain ID: "
NONCE_TAG = "Nonce: "
ISSUED_AT_TAG = "Issued At: "
EXPIRATION_TIME_TAG = "Expiration Time: "
NOT_BEFORE_TAG = "Not Before: "
REQUEST_ID_TAG = "Request ID: "
RESOURCES_TAG = "Resources:"


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp with milliseconds."""
    utc = moment.astimezone(UTC)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValueError: If the value is not a valid timestamp with a UTC offset.
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp must carry a UTC offset: {value!r}")
    return parsed


@dataclass
class SiweMessage:
    """Structured EIP-4361 sign-in request."""

    domain: str
    address: str
    uri: str
    chain_id: int
    nonce: str
    issued_at: str
    version: str = SIWE_VERSION
    statement: str | None = None
    scheme: str | None = None
    expiration_time: str | None = None
    not_before: str | None = None
    request_id: str | None = None
    resources: list[str] = field(default_factory=list)

    def prepare_message(self) -> str:
        """Serialise the message into the text the wallet signs."""
        header = f"{self.domain}{_HEADER_SUFFIX}"
        if self.scheme:
            header = f"{self.scheme}://{header}"
        prefix = f"{header}\n{self.address}\n\n"
        if self.statement:
            prefix += f"{self.statement}\n"

        suffix = [
            f"{URI_TAG}{self.uri}",
            f"{VERSION_TAG}{self.version}",
            f"{CHAIN_ID_TAG}{self.chain_id}",
            f"{NONCE_TAG}{self.nonce}",
            f"{ISSUED_AT_TAG}{self.issued_at}",
        ]
        if self.expiration_time:
            suffix.append(f"{EXPIRATION_TIME_TAG}{self.expiration_time}")
        if self.not_before:
            suffix.append(f"{NOT_BEFORE_TAG}{self.not_before}")
        if self.request_id is not None:
            suffix.append(f"{REQUEST_ID_TAG}{self.request_id}")
        if self.resources:
            suffix.append("\n".join([RESOURCES_TAG, *(f"- {res}" for res in self.resources)]))
        return prefix + "\n" + "\n".join(suffix)

    @classmethod
    def parse(cls, text: str) -> SiweMessage:
        """Parse the text produced by `prepare_message`.

        Raises:
            ValueError: If the text does not follow the EIP-4361 grammar.
        """
        if not isinstance(text, str) or not text:
            raise ValueError("Message must be a non-empty string")
        reader = _LineReader(text.split("\n"))

        header = _HEADER_RE.match(reader.next("header"))
        if header is None:
            raise ValueError("Invalid message header")

        address = reader.next("address")
        if not is_checksum_address(address):
            raise ValueError("Address must be an EIP-55 checksum address")

        if reader.next("blank line") != "":
            raise ValueError("Expected a blank line after the address")

        statement: str | None = None
        line = reader.next("statement")
        if line != "":
            statement = line
            if reader.next("blank line") != "":
                raise ValueError("Expected a blank line after the statement")

        uri = reader.tagged(URI_TAG)
        version = reader.tagged(VERSION_TAG)
        if version != SIWE_VERSION:
            raise ValueError(f"Unsupported message version: {version!r}")
        chain_id_text = reader.tagged(CHAIN_ID_TAG)
        if not chain_id_text.isdigit():
            raise ValueError(f"Invalid chain id: {chain_id_text!r}")
        nonce = reader.tagged(NONCE_TAG)
        if not _NONCE_RE.match(nonce):
            raise ValueError("Nonce must be at least 8 alphanumeric characters")
        issued_at = reader.tagged(ISSUED_AT_TAG)
        parse_timestamp(issued_at)

        expiration_time = reader.optional(EXPIRATION_TIME_TAG)
        if expiration_time is not None:
            parse_timestamp(expiration_time)
        not_before = reader.optional(NOT_BEFORE_TAG)
        if not_before is not None:
            parse_timestamp(not_before)
        request_id = reader.optional(REQUEST_ID_TAG)

        resources: list[str] = []
        if reader.peek() == RESOURCES_TAG:
            reader.next("resources")
            while (entry := reader.peek()) is not None and entry.startswith("- "):
                resources.append(reader.next("resource")[2:])
            if not resources:
                raise ValueError("Resources section must list at least one URI")

        if not reader.exhausted():
            raise ValueError(f"Unexpected content: {reader.peek()!r}")

        return cls(
            domain=header.group("domain"),
            address=address,
            uri=uri,
            chain_id=int(chain_id_text),
            nonce=nonce,
            issued_at=issued_at,
            version=version,
            statement=statement,
            scheme=header.group("scheme"),
            expiration_time=expiration_time,
            not_before=not_before,
            request_id=request_id,
            resources=resources,
        )

    @property
    def expires_at(self) -> datetime | None:
        return parse_timestamp(self.expiration_time) if self.expiration_time else None

    @property
    def valid_from(self) -> datetime | None:
        return parse_timestamp(self.not_before) if self.not_before else None


class _LineReader:
    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self._pos = 0

    def peek(self) -> str | None:
        if self._pos >= len(self._lines):
            return None
        return self._lines[self._pos]

    def next(self, what: str) -> str:
        line = self.peek()
        if line is None:
            raise ValueError(f"Message ended before {what}")
        self._pos += 1
        return line

    def tagged(self, tag: str) -> str:
        line = self.next(tag.strip())
        if not line.startswith(tag):
            raise ValueError(f"Expected {tag.strip()!r} line, got {line!r}")
        return line[len(tag):]

    def optional(self, tag: str) -> str | None:
        line = self.peek()
        if line is None or not line.startswith(tag):
            return None
        self._pos += 1
        return line[len(tag):]

    def exhausted(self) -> bool:
        return self._pos >= len(self._lines)


def build_challenge(
    identity: str,
    domain: str,
    network_id: int,
    nonce: str,
    *,
    now: datetime | None = None,
    statement: str | None = None,
    uri: str | None = None,
    ttl_seconds: int | None = None,
) -> str:
    """Build the sign-in message text for `identity`.

    Unset keyword arguments fall back to the configured statement, URI and
    challenge lifetime. A lifetime of zero omits the expiration time.
    """
    issued = now or datetime.now(UTC)
    ttl = settings.challenge_ttl_seconds if ttl_seconds is None else ttl_seconds
    message = SiweMessage(
        domain=domain,
        address=identity,
        statement=statement if statement is not None else settings.siwe_statement,
        uri=uri or settings.siwe_uri,
        chain_id=network_id,
        nonce=nonce,
        issued_at=format_timestamp(issued),
        expiration_time=format_timestamp(issued + timedelta(seconds=ttl)) if ttl > 0 else None,
    )
    return message.prepare_message()
