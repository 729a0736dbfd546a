import pytest

from dora_metrics.domain.detectors import (
    deployment_incident_type,
    detect_failures,
    extract_incident_type,
    is_hotfix_deployment,
    is_revert_commit,
)
from dora_metrics.domain.models import Commit


class TestIsRevertCommit:
    @pytest.mark.parametrize("message", [None, ""])
    def test_empty_message(self, message):
        assert is_revert_commit(message) is False

    @pytest.mark.parametrize(
        "message",
        [
            'Revert "feat: add new feature"',
            'Revert "fix(TECH-123): fix bug"',
            "revert(TECH-123): undo feature",
            "Revert(scope): message",
            "revert: undo changes",
            "Revert: previous commit",
            "revert previous changes",
            "This is a revert commit for TECH-123",
            "rollback to previous version",
            "Rollback feature flag",
            "Emergency rollback",
        ],
    )
    def test_detects_reverts(self, message):
        assert is_revert_commit(message) is True

    @pytest.mark.parametrize(
        "message",
        [
            "feat: add new feature",
            "fix(TECH-123): fix bug",
            "reverted to use old API",
            "chore: rollbacks are handled elsewhere",
        ],
    )
    def test_ignores_normal_commits(self, message):
        assert is_revert_commit(message) is False


class TestIsHotfixDeployment:
    @pytest.mark.parametrize("ref", [None, ""])
    def test_empty_ref(self, ref):
        assert is_hotfix_deployment(ref) is False

    @pytest.mark.parametrize(
        "ref",
        [
            "refs/heads/hotfix/critical-bug",
            "hotfix-v1.2.3",
            "refs/heads/fix/bug-123",
            "refs/heads/fix-urgent",
            "refs/heads/emergency/production-down",
        ],
    )
    def test_detects_hotfix_refs(self, ref):
        assert is_hotfix_deployment(ref) is True

    @pytest.mark.parametrize(
        "ref",
        [
            "refs/heads/main",
            "refs/heads/develop",
            "refs/heads/feature/new-feature",
            "refs/heads/release/v1.0.0",
        ],
    )
    def test_ignores_normal_refs(self, ref):
        assert is_hotfix_deployment(ref) is False


class TestExtractIncidentType:
    def test_none_when_nothing_detected(self):
        assert extract_incident_type("feat: add feature", "refs/heads/main") is None

    def test_revert(self):
        assert extract_incident_type("rollback feature", "refs/heads/main") == "revert"

    def test_hotfix(self):
        assert extract_incident_type("", "refs/heads/fix/urgent") == "hotfix"

    def test_revert_wins_over_hotfix(self):
        assert extract_incident_type('Revert "fix: bug"', "refs/heads/hotfix/fix") == "revert"


class TestDeploymentClassification:
    def test_normal_deployment(self):
        commits = [Commit("feat(TECH-123): add new feature"), Commit("fix(TECH-456): fix bug")]
        assert detect_failures(commits, "refs/heads/main") is False
        assert deployment_incident_type(commits, "refs/heads/main") is None

    def test_revert_commit_anywhere_in_deployment(self):
        commits = [Commit("feat(TECH-123): add feature"), Commit('Revert "feat(TECH-123): add feature"')]
        assert detect_failures(commits, "refs/heads/main") is True
        assert deployment_incident_type(commits, "refs/heads/main") == "revert"

    def test_hotfix_ref(self):
        commits = [Commit("fix(TECH-789): critical fix")]
        assert detect_failures(commits, "refs/heads/hotfix/critical-bug") is True
        assert deployment_incident_type(commits, "refs/heads/hotfix/critical-bug") == "hotfix"

    def test_revert_on_hotfix_branch_is_revert(self):
        commits = [Commit('Revert "feat: bad feature"')]
        assert deployment_incident_type(commits, "refs/heads/hotfix/revert-bad") == "revert"
