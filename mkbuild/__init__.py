"""mkbuild - 由 MKBuild.yaml 清单生成 CMakeLists.txt 与容器测试脚本"""

__version__ = "0.1.0"
