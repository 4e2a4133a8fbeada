"""Attribute keys contributed to test telemetry."""

SCM_TYPE = "scm.type"
SCM_PROVIDER = "scm.provider"
SCM_BRANCH = "scm.branch"
SCM_BASE_REF = "scm.baseRef"
SCM_REPOSITORY = "scm.repository"
SCM_AUTHORS = "scm.authors"
SCM_COMMITTERS = "scm.committers"

GIT_ADDITIONS = "scm.git.additions"
GIT_DELETIONS = "scm.git.deletions"
GIT_MODIFIED_FILES = "scm.git.files.modified"
GIT_CLONE_SHALLOW = "scm.git.clone.shallow"
GIT_CLONE_DEPTH = "scm.git.clone.depth"

SCM_TYPE_GIT = "git"
