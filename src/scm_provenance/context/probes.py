"""Provider probes: recognise one CI system's environment signature each.

A probe returns None when its signature is absent, otherwise the full
context. Probes never look at each other's variables.
"""

from typing import Mapping, Optional

from .models import ExecutionContext, Provider

Environ = Mapping[str, str]


def from_local(environ: Environ) -> Optional[ExecutionContext]:
    """BRANCH is mandatory; a non-empty TARGET_BRANCH makes it a change request."""
    branch = environ.get("BRANCH", "")
    if not branch:
        return None

    target = environ.get("TARGET_BRANCH", "")
    return ExecutionContext(
        branch=branch,
        change_request=target != "",
        commit="",
        provider=Provider.NONE,
        target_branch=target,
    )


def from_github(environ: Environ) -> Optional[ExecutionContext]:
    sha = environ.get("GITHUB_SHA", "")
    if not sha:
        return None

    # GITHUB_BASE_REF / GITHUB_HEAD_REF are only set on pull_request events
    base_ref = environ.get("GITHUB_BASE_REF", "")
    head_ref = environ.get("GITHUB_HEAD_REF", "")
    return ExecutionContext(
        branch=environ.get("GITHUB_REF_NAME", ""),
        change_request=base_ref != "" and head_ref != "",
        commit=sha,
        provider=Provider.GITHUB,
        target_branch=base_ref,
    )


def from_jenkins(environ: Environ) -> Optional[ExecutionContext]:
    if not environ.get("JENKINS_URL", ""):
        return None

    # multibranch pipeline variables
    is_change = environ.get("CHANGE_ID", "") != ""
    branch = environ.get("BRANCH_NAME", "")
    return ExecutionContext(
        branch=branch,
        change_request=is_change,
        commit=environ.get("GIT_COMMIT", ""),
        provider=Provider.JENKINS,
        target_branch=environ.get("CHANGE_TARGET", "") if is_change else branch,
    )


def from_gitlab(environ: Environ) -> Optional[ExecutionContext]:
    ref_name = environ.get("CI_COMMIT_REF_NAME", "")
    if not ref_name:
        return None

    # CI_COMMIT_BRANCH is only populated on branch pipelines
    return ExecutionContext(
        branch=ref_name,
        change_request=environ.get("CI_COMMIT_BRANCH", "") == "",
        commit=environ.get("CI_MERGE_REQUEST_SOURCE_BRANCH_SHA", ""),
        provider=Provider.GITLAB,
        target_branch=environ.get("CI_MERGE_REQUEST_TARGET_BRANCH_NAME", ""),
    )
