"""CMakeLists.txt 生成原语

- emitter: 带缩进作用域的只追加文本缓冲区
- conditionals: 平台条件分支
- commands: 下载/检查/全局构建状态等输出原语
- flags: 编译器加固参数与平台检查
- targets: 构建目标与测试
"""

from mkbuild.cmake.conditionals import (
    Conditional,
    if_apple,
    if_compiler_family,
    if_pointer_width,
    if_windows,
)
from mkbuild.cmake.emitter import CMakeEmitter

__all__ = [
    "CMakeEmitter",
    "Conditional",
    "if_apple",
    "if_compiler_family",
    "if_pointer_width",
    "if_windows",
]
