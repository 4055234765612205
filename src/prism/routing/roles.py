"""Role catalogue: the fixed task personas a request can run as.

Each Role selects a system prompt and an ordered backend preference list.
The catalogue is built once at import and is read-only.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from prism.providers.base import BackendId


class Role(StrEnum):
    """Fixed task category for a request."""

    ARCHITECT = "architect"
    CODER = "coder"
    REVIEWER = "reviewer"
    TESTER = "tester"
    DEBUGGER = "debugger"
    OPTIMIZER = "optimizer"
    SECURITY = "security"
    DEVOPS = "devops"


@dataclass(frozen=True, slots=True)
class RoleProfile:
    """System prompt and backend preference order for one Role.

    Attributes:
        role: The Role this profile describes.
        system_prompt: Persona text sent as the system message.
        preferences: Backends to try, most preferred first.
    """

    role: Role
    system_prompt: str
    preferences: tuple[BackendId, ...]


_G, _D, _C, _O = BackendId.GEMINI, BackendId.DEEPSEEK, BackendId.CLAUDE, BackendId.OPENAI

ROLE_CATALOGUE: Mapping[Role, RoleProfile] = MappingProxyType({
    Role.ARCHITECT: RoleProfile(
        role=Role.ARCHITECT,
        system_prompt=(
            "You are an expert software architect. Your mission is to design robust, "
            "scalable architectures.\n"
            "Domain: system design, design patterns, scalability, security.\n"
            "Style: professional, strategic, big-picture thinking."
        ),
        preferences=(_C, _O, _G, _D),
    ),
    Role.CODER: RoleProfile(
        role=Role.CODER,
        system_prompt=(
            "You are an expert programmer. Your mission is to write clean, efficient, "
            "maintainable code.\n"
            "Domain: writing code, best practices, performance, error handling.\n"
            "Style: practical, direct, focused on implementation."
        ),
        preferences=(_G, _D, _C, _O),
    ),
    Role.REVIEWER: RoleProfile(
        role=Role.REVIEWER,
        system_prompt=(
            "You are a professional code reviewer. Your mission is to assess quality and "
            "find problems.\n"
            "Domain: code review, vulnerability detection, standards compliance, "
            "improvement suggestions.\n"
            "Style: constructive, precise, quality-minded."
        ),
        preferences=(_C, _O, _G, _D),
    ),
    Role.TESTER: RoleProfile(
        role=Role.TESTER,
        system_prompt=(
            "You are an expert software tester. Your mission is to ensure quality and "
            "reliability.\n"
            "Domain: writing tests, test cases, coverage, product quality.\n"
            "Style: thorough, considers every possibility, preventive."
        ),
        preferences=(_G, _D, _O, _C),
    ),
    Role.DEBUGGER: RoleProfile(
        role=Role.DEBUGGER,
        system_prompt=(
            "You are an exceptional debugger. Your mission is to diagnose and solve "
            "hard problems.\n"
            "Domain: error analysis, root-cause tracing, practical fixes, performance.\n"
            "Style: analytical, methodical, patient."
        ),
        preferences=(_G, _D, _C, _O),
    ),
    Role.OPTIMIZER: RoleProfile(
        role=Role.OPTIMIZER,
        system_prompt=(
            "You are an outstanding performance engineer. Your mission is to make "
            "applications faster and more efficient.\n"
            "Domain: speed, resource usage, memory efficiency, algorithms.\n"
            "Style: precise, measures with numbers, results-focused."
        ),
        preferences=(_G, _D, _O, _C),
    ),
    Role.SECURITY: RoleProfile(
        role=Role.SECURITY,
        system_prompt=(
            "You are a cybersecurity expert. Your mission is to protect applications "
            "from threats.\n"
            "Domain: application security, vulnerability prevention, secure practices, "
            "data protection.\n"
            "Style: cautious, thorough, thinks like an attacker."
        ),
        preferences=(_C, _O, _G, _D),
    ),
    Role.DEVOPS: RoleProfile(
        role=Role.DEVOPS,
        system_prompt=(
            "You are a DevOps expert. Your mission is to streamline operations and "
            "ensure reliability.\n"
            "Domain: automation, CI/CD, infrastructure, monitoring, deployment.\n"
            "Style: practical, automation-first, infrastructure-minded."
        ),
        preferences=(_G, _D, _O, _C),
    ),
})


def get_profile(role: Role | str) -> RoleProfile:
    """Return the profile for a role.

    Raises:
        ValueError: If role is not a known Role value.
    """
    return ROLE_CATALOGUE[Role(role)]
