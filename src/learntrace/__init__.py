"""LearnTrace - 学習活動のイベント記録と状態投影"""

__version__ = "0.1.0"
