"""清单数据模型

MKBuild.yaml 解析后的全部数据类集中定义于此，
CMake 生成器和容器运行服务统一从这里导入 PackageInfo 及其子结构。
"""

from __future__ import annotations

from dataclasses import dataclass, field

MANIFEST_VERSION = 1


@dataclass
class BuildInfo:
    """可执行文件的构建信息"""

    compile: list[str] = field(default_factory=list)  # 需要编译的源文件
    link: list[str] = field(default_factory=list)     # 需要链接的库
    install: bool = False


@dataclass
class LibraryBuildInfo(BuildInfo):
    """库的构建信息，额外带有对外公开的头文件"""

    headers: list[str] = field(default_factory=list)


@dataclass
class ScriptBuildInfo:
    """脚本目标，只有是否安装一个属性"""

    install: bool = False


@dataclass
class TargetsInfo:
    """全部构建目标"""

    libraries: dict[str, LibraryBuildInfo] = field(default_factory=dict)
    executables: dict[str, BuildInfo] = field(default_factory=dict)
    scripts: dict[str, ScriptBuildInfo] = field(default_factory=dict)

    def names(self) -> list[str]:
        return [*self.libraries, *self.executables, *self.scripts]


@dataclass
class TestInfo:
    """单个测试的调用命令（已拆分为参数列表）"""

    __test__ = False  # 防止 pytest 把它当作测试类收集

    command: list[str] = field(default_factory=list)


@dataclass
class FunctionCheck:
    """检查某个函数是否存在，存在则追加预处理定义"""

    name: str
    define: str


@dataclass
class SymbolCheck:
    """检查某个头文件中的符号是否存在，存在则追加预处理定义"""

    name: str
    header: str
    define: str


@dataclass
class PackageInfo:
    """一个包的完整描述（对应一份 MKBuild.yaml）"""

    name: str
    version: int = MANIFEST_VERSION
    dependencies: list[str] = field(default_factory=list)  # 顺序即生成顺序
    targets: TargetsInfo = field(default_factory=TargetsInfo)
    tests: dict[str, TestInfo] = field(default_factory=dict)
    function_checks: list[FunctionCheck] = field(default_factory=list)
    symbol_checks: list[SymbolCheck] = field(default_factory=list)
    docker: str = ""                 # 运行测试的容器镜像，空则使用配置默认值
    docker_tc_disabled: bool = False  # 容器内不使用 tc 人为增加网络延迟
