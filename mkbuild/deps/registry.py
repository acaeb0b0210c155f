"""依赖规则注册表

职责:
- 按依赖标识精确查找规则（无前缀匹配，无版本号）
- 批量找出未知标识，供生成前一次性检查
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from mkbuild.core.exceptions import DependencyError
from mkbuild.deps.models import DependencyRule
from mkbuild.deps.rules import RULES, build_table

logger = logging.getLogger(__name__)


class DependencyRegistry:
    """依赖规则注册表 - 默认使用内置规则表"""

    def __init__(
        self, rules: Mapping[str, DependencyRule] | Iterable[DependencyRule] | None = None,
    ) -> None:
        if rules is None:
            self._rules = dict(RULES)
        elif isinstance(rules, Mapping):
            self._rules = build_table(rules.values())
        else:
            self._rules = build_table(rules)
        logger.debug("依赖注册表: %d 条规则", len(self._rules))

    def get(self, identifier: str) -> DependencyRule | None:
        return self._rules.get(identifier)

    def require(self, identifier: str) -> DependencyRule:
        """查找规则，不存在时抛出 DependencyError"""
        rule = self._rules.get(identifier)
        if rule is None:
            raise DependencyError(f"未知依赖: {identifier}", details=[identifier])
        return rule

    def find_unknown(self, identifiers: Iterable[str]) -> list[str]:
        """按输入顺序返回注册表中不存在的标识"""
        return [i for i in identifiers if i not in self._rules]

    def identifiers(self) -> list[str]:
        return sorted(self._rules)

    def rules(self) -> Iterator[DependencyRule]:
        """按标识排序遍历全部规则"""
        for identifier in self.identifiers():
            yield self._rules[identifier]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._rules

    def __len__(self) -> int:
        return len(self._rules)
