"""
Fixed DSL scripts for well-known page layouts.

Templates ignore the page HTML entirely: they assume the selectors of the
layout they are named after and only substitute profile values. Missing
values render as empty strings.
"""

from __future__ import annotations

from typing import Callable, Mapping

from domain.models import Click, DslCommand, Hover, Type, Upload, UserProfile, render_script


def _value(profile: UserProfile, name: str) -> str:
    return profile.get(name) or ""


def job_application_template(profile: UserProfile) -> str:
    commands: list[DslCommand] = [
        Click("#accept-cookies"),
        Hover("#careers-link"),
        Click("#careers-link"),
        Click("#apply-now"),
        Type("#first-name", _value(profile, "first_name")),
        Type("#last-name", _value(profile, "last_name")),
        Type("#email", _value(profile, "email")),
        Type("#phone", _value(profile, "phone")),
        Upload("#resume", _value(profile, "cv_path")),
        Click("#gdpr-consent"),
        Click("#submit-application"),
    ]
    return render_script(commands)


def registration_template(profile: UserProfile) -> str:
    password = _value(profile, "password")
    commands: list[DslCommand] = [
        Click("#register"),
        Type("#username", _value(profile, "username")),
        Type("#email", _value(profile, "email")),
        Type("#password", password),
        Type("#confirm-password", password),
        Click("#terms-checkbox"),
        Click("#create-account"),
    ]
    return render_script(commands)


def linkedin_apply_template(profile: UserProfile) -> str:
    # LinkedIn credentials are kept apart from the site login in the profile.
    commands: list[DslCommand] = [
        Click("#sign-in"),
        Type("#username", _value(profile, "linkedin_email")),
        Type("#password", _value(profile, "linkedin_password")),
        Click("#sign-in-submit"),
        Click(".jobs-apply-button"),
        Upload("#resume-upload", _value(profile, "cv_path")),
        Type("#phone", _value(profile, "phone")),
        Click("#follow-company"),
        Click("#submit-application"),
    ]
    return render_script(commands)


TEMPLATES: Mapping[str, Callable[[UserProfile], str]] = {
    "job_application": job_application_template,
    "registration": registration_template,
    "linkedin_apply": linkedin_apply_template,
}


def render_template(name: str, profile: UserProfile) -> str:
    """Render the template registered under ``name``.

    Raises:
        KeyError: if no template has that name.
    """
    try:
        template = TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown template '{name}'. Available: {', '.join(sorted(TEMPLATES))}") from None
    return template(profile)
