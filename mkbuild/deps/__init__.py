"""依赖规则模块

- models.py: 规则数据模型
- rules.py: 内置规则表
- registry.py: 按标识查找规则
- emit.py: 把规则翻译为 CMake 文本
"""

from mkbuild.deps.emit import apply_rule
from mkbuild.deps.models import DependencyRule, RuleKind
from mkbuild.deps.registry import DependencyRegistry
from mkbuild.deps.rules import RULES

__all__ = [
    "DependencyRegistry",
    "DependencyRule",
    "RULES",
    "RuleKind",
    "apply_rule",
]
