from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from ministry.authz import ScopeKind


class AuthConfig(BaseModel):
    # dummy: bearer token is the integer user id (local dev / tests).
    # session: bearer token is a signed session JWT, see ministry.identity.
    provider: Literal["dummy", "session"] = "dummy"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_scopes: list[ScopeKind] = Field(default_factory=list)
    scope_filter: bool = False


class RouteRule(BaseModel):
    """One `routes:` entry. Unset fields fall back to `default:`."""

    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    required_scopes: list[ScopeKind] = Field(default_factory=list)
    scope_filter: bool | None = None

    @field_validator("methods")
    @classmethod
    def _upper(cls, methods: list[str]) -> list[str]:
        return [m.upper() for m in methods]

    @property
    def is_template(self) -> bool:
        return "{" in self.path


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    required_scopes: frozenset[ScopeKind]
    scope_filter: bool

    @classmethod
    def from_default(cls, default: DefaultRule) -> EffectiveRule:
        return cls(
            auth_required=default.auth_required,
            required_scopes=frozenset(default.required_scopes),
            scope_filter=default.scope_filter,
        )

    @classmethod
    def from_route(cls, rule: RouteRule, default: DefaultRule) -> EffectiveRule:
        scope_filter = default.scope_filter if rule.scope_filter is None else rule.scope_filter
        # Asking for scopes or filtering implies a caller, even under a public default.
        implied = default.auth_required or bool(rule.required_scopes) or scope_filter
        return cls(
            auth_required=implied if rule.auth_required is None else rule.auth_required,
            required_scopes=frozenset(rule.required_scopes or default.required_scopes),
            scope_filter=scope_filter,
        )


def _template_regex(path_template: str) -> re.Pattern[str]:
    # "/members/{id}" -> r"^/members/[^/]+$"
    parts = re.split(r"\{[^/]+\}", path_template)
    return re.compile("^" + "[^/]+".join(re.escape(p) for p in parts) + "$")


class SecurityConfig:
    """
    Validated config plus route lookup.

    Literal paths are checked before templates, so `/members/me` can be
    configured apart from `/members/{id}`. Within each group the first rule
    listing the method wins.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model
        self._literal: dict[str, list[RouteRule]] = {}
        self._templates: list[tuple[re.Pattern[str], RouteRule]] = []
        for rule in model.routes:
            if rule.is_template:
                self._templates.append((_template_regex(rule.path), rule))
            else:
                self._literal.setdefault(rule.path, []).append(rule)

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def match(self, path: str, method: str) -> EffectiveRule:
        method = method.upper()
        rule = self._find(path, method)
        if rule is None:
            return EffectiveRule.from_default(self.model.default)
        return EffectiveRule.from_route(rule, self.model.default)

    def _find(self, path: str, method: str) -> RouteRule | None:
        for rule in self._literal.get(path, ()):
            if method in rule.methods:
                return rule
        for regex, rule in self._templates:
            if method in rule.methods and regex.match(path):
                return rule
        return None


def load_security_config(path: Path) -> SecurityConfig:
    raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    return SecurityConfig(SecurityConfigModel.model_validate(raw["security"]))
