import logging
import os
from typing import Optional

import git
import git.exc
from git import GitCommandError

from git_graph_data import SHORT_HASH_LENGTH, Commit, CommitPage, CommitSourceError


class GitManager:
    """本地仓库的提交来源，按页读取 `git log --all --topo-order`"""

    def __init__(self, repo_path: str):
        self.repo_path = os.path.expanduser(repo_path)
        self.repo: Optional[git.Repo] = None

    def initialize(self) -> bool:
        """初始化 Git 仓库（支持在子目录中打开）"""
        try:
            self.repo = git.Repo(self.repo_path, search_parent_directories=True)
            return True
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            logging.warning("GitManager: %s 不是 Git 仓库", self.repo_path)
            return False

    def _decorations_map(self) -> dict[str, list[str]]:
        """提交 hash -> 引用标签，HEAD 排在最前"""
        decorations_map: dict[str, list[str]] = {}
        head = self.repo.head
        active_branch_name = None
        if head.is_detached:
            decorations_map.setdefault(head.commit.hexsha, []).append("HEAD")
        else:
            active_branch_name = self.repo.active_branch.name
            decorations_map.setdefault(head.commit.hexsha, []).append(f"HEAD -> {active_branch_name}")

        # Populate decorations_map with local branches
        for branch in self.repo.heads:
            if branch.name == active_branch_name:
                continue
            decorations_map.setdefault(branch.commit.hexsha, []).append(branch.name)

        # Populate decorations_map with remote references
        for remote in self.repo.remotes:
            for ref in remote.refs:
                decorations_map.setdefault(ref.commit.hexsha, []).append(ref.name)

        for tag in self.repo.tags:
            try:
                tag_commit = tag.commit
            except ValueError:
                # 指向 tree/blob 的标签不属于提交图
                logging.debug("GitManager: 跳过非提交标签 %s", tag.name)
                continue
            decorations_map.setdefault(tag_commit.hexsha, []).append(f"tag: {tag.name}")

        return decorations_map

    def get_commit_page(self, limit: int = 50, skip: int = 0) -> CommitPage:
        """获取一页提交历史

        参数：
            limit: 本页最多返回的提交数量（默认为 50）
            skip: 跳过的提交数量（默认为 0）

        多取一个提交用于判断是否还有下一页。
        """
        if not self.repo and not self.initialize():
            raise CommitSourceError(f"not a git repository: {self.repo_path}")

        if not self.repo.head.is_valid():
            # 还没有任何提交
            return CommitPage(commits=(), has_more=False)

        try:
            decorations_map = self._decorations_map()
            commits = []
            for commit in self.repo.iter_commits(all=True, topo_order=True, max_count=limit + 1, skip=skip):
                commits.append(
                    Commit(
                        hash=commit.hexsha,
                        short_hash=commit.hexsha[:SHORT_HASH_LENGTH],
                        message=commit.message.strip().split("\n")[0],
                        author=commit.author.name,
                        author_email=commit.author.email,
                        date=commit.authored_datetime.isoformat(),
                        parents=tuple(parent.hexsha for parent in commit.parents),
                        refs=tuple(decorations_map.get(commit.hexsha, [])),
                    )
                )
        except GitCommandError as e:
            logging.exception("GitManager: git log 失败")
            error_message = f"git log failed: {e!s}"
            if e.stderr:
                error_message += f"\nDetails: {e.stderr.strip()}"
            raise CommitSourceError(error_message) from e

        has_more = len(commits) > limit
        if has_more:
            commits = commits[:limit]
        logging.debug("GitManager: loaded %d commits (skip=%d, has_more=%s)", len(commits), skip, has_more)
        return CommitPage(commits=tuple(commits), has_more=has_more)

    def fetch_page(self, limit: int, offset: int) -> CommitPage:
        return self.get_commit_page(limit=limit, skip=offset)
