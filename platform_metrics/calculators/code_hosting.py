"""
Code-hosting calculator (GitHub).

Sub-dimensions: code quality, language diversity, commit frequency,
collaboration, project impact. Forked repositories are excluded from
every "own repository" count.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from core.clock import ensure_utc

from ..config import CodeHostingConfig
from ..types import GitHubProfile, GitHubRepository, Platform, PlatformFamily, PlatformMetrics
from .base import BasePlatformCalculator, as_number, linear, round_to, safe_ratio, saturate


class CodeHostingCalculator(BasePlatformCalculator[GitHubProfile, GitHubRepository]):
    """Scores a GitHub account from its profile and repositories."""

    def __init__(self, config: Optional[CodeHostingConfig] = None):
        self._config = config or CodeHostingConfig()

    @property
    def family(self) -> PlatformFamily:
        return PlatformFamily.CODE_HOSTING

    @property
    def max_recommendations(self) -> int:
        return self._config.max_recommendations

    def _calculate(
        self,
        profile: GitHubProfile,
        activity: List[GitHubRepository],
        now: datetime,
    ) -> PlatformMetrics:
        cfg = self._config
        own_repos = [repo for repo in activity if not repo.is_fork]
        repo_count = len(own_repos)
        stats = profile.contributions

        # ----------------------------------------------------
        # Languages (by bytes across own repos)
        # ----------------------------------------------------
        language_bytes: Dict[str, float] = {}
        for repo in own_repos:
            for language, size in (repo.languages or {}).items():
                language_bytes[language] = language_bytes.get(language, 0.0) + as_number(size)

        languages = list(language_bytes)
        language_diversity = min(len(languages) / cfg.language_saturation, 1.0) * 100
        top_language = None
        if language_bytes:
            top_language = sorted(language_bytes.items(), key=lambda item: -item[1])[0][0]

        # ----------------------------------------------------
        # Code quality
        # ----------------------------------------------------
        total_stars = sum(as_number(repo.stars) for repo in own_repos)
        total_forks = sum(as_number(repo.forks) for repo in own_repos)
        with_description = sum(1 for repo in own_repos if repo.description)
        with_license = sum(1 for repo in own_repos if repo.license)
        with_topics = sum(1 for repo in own_repos if repo.topics)

        code_quality = min(
            safe_ratio(with_description, repo_count) * cfg.description_credit
            + safe_ratio(with_license, repo_count) * cfg.license_credit
            + safe_ratio(with_topics, repo_count) * cfg.topics_credit
            + saturate(total_stars, cfg.quality_star_saturation, cfg.quality_star_credit),
            100,
        )

        # ----------------------------------------------------
        # Activity and collaboration
        # ----------------------------------------------------
        total_commits = as_number(stats.total_commits)
        commit_frequency = min(linear(total_commits, cfg.commit_days, cfg.commit_multiplier), 100)

        collaboration = min(
            linear(as_number(stats.total_prs), cfg.pr_saturation, cfg.pr_credit)
            + linear(as_number(stats.total_reviews), cfg.review_saturation, cfg.review_credit)
            + linear(as_number(stats.total_issues), cfg.issue_saturation, cfg.issue_credit),
            100,
        )

        followers = as_number(profile.followers)
        project_impact = min(
            linear(total_stars, cfg.impact_star_saturation, cfg.impact_star_credit)
            + linear(total_forks, cfg.impact_fork_saturation, cfg.impact_fork_credit)
            + linear(followers, cfg.impact_follower_saturation, cfg.impact_follower_credit),
            100,
        )

        active_since = now - timedelta(days=cfg.active_window_days)
        active_repos = sum(
            1 for repo in own_repos
            if repo.pushed_at is not None and ensure_utc(repo.pushed_at) > active_since
        )

        sub_scores = {
            "code_quality": code_quality,
            "language_diversity": language_diversity,
            "commit_frequency": commit_frequency,
            "collaboration": collaboration,
            "project_impact": project_impact,
        }

        # ----------------------------------------------------
        # Recommendations
        # ----------------------------------------------------
        recommendations: List[str] = []
        if repo_count == 0:
            recommendations.append("Create public repositories to showcase your work")
        if language_diversity < cfg.min_language_diversity:
            recommendations.append("Explore more programming languages to increase diversity")
        if with_description < repo_count * cfg.min_description_ratio:
            recommendations.append("Add descriptions to more of your repositories")
        if with_license < repo_count * cfg.min_license_ratio:
            recommendations.append("Add licenses to your repositories")
        if commit_frequency < cfg.min_commit_frequency:
            recommendations.append("Maintain consistent commit activity")
        if collaboration < cfg.min_collaboration:
            recommendations.append("Contribute to other projects through PRs and code reviews")
        if active_repos < cfg.min_active_repos:
            recommendations.append("Keep more projects actively maintained")
        if profile.bio is None:
            recommendations.append("Add a bio to your GitHub profile")

        breakdown = {
            "repositories": repo_count,
            "stars": int(total_stars),
            "forks": int(total_forks),
            "followers": int(followers),
            "languages": languages,
            "top_language": top_language,
            "avg_commits_per_repo": round_to(total_commits / repo_count, 1) if repo_count else 0.0,
            "active_repos": active_repos,
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
        }

        return self._metrics(
            Platform.GITHUB,
            sub_scores,
            cfg.blend_weights,
            breakdown,
            recommendations,
        )
