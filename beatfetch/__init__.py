"""
BeatFetch

解析并安装 Beat Saber 模组依赖。
"""

__version__ = "0.1.0"
