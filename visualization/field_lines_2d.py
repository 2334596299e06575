# visualization/field_lines_2d.py
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.collections import LineCollection
from typing import List, Tuple, Optional

from core.data_schema import ChargeField
from physics.point import Sign


class FieldLinePlot:
    """
    2D电场线静态预览

    设计特性：
        - 场线颜色由源电荷符号决定
        - 电荷按可视半径画圆，标注id与电荷量
        - 画布坐标y轴向下，与交互界面一致
    """

    COLORS = {
        'background': '#f5f5f7',
        'positive': '#ff3b30',
        'negative': '#007aff',
        'text': '#1d1d1f'
    }

    def __init__(self, fields: List[ChargeField],
                 width: float,
                 height: float,
                 line_width: float = 1.0):
        """
        Args:
            fields: 经过重复线消除的最终场列表
            width: 画布宽度
            height: 画布高度
        """
        self.fields = fields
        self.width = width
        self.height = height
        self.line_width = line_width

    def _sign_color(self, sign: Sign) -> str:
        return self.COLORS['positive'] if sign is Sign.POSITIVE else self.COLORS['negative']

    def _create_figure(self, figsize: Tuple[int, int] = (12, 8)):
        fig, ax = plt.subplots(figsize=figsize, dpi=100)
        fig.patch.set_facecolor(self.COLORS['background'])
        ax.set_facecolor('white')
        ax.set_xlim(0, self.width)
        ax.set_ylim(self.height, 0)
        ax.set_aspect('equal')
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        return fig, ax

    def _plot_lines(self, ax):
        for f in self.fields:
            segments = [line.points for line in f.lines if len(line) >= 2]
            if not segments:
                continue
            ax.add_collection(LineCollection(
                segments,
                colors=self._sign_color(f.source.sign),
                linewidths=self.line_width,
                alpha=0.8,
                zorder=2
            ))

    def _plot_charges(self, ax):
        for f in self.fields:
            charge = f.source
            color = self._sign_color(charge.sign)
            ax.add_patch(mpatches.Circle(
                tuple(charge.position), charge.radius,
                facecolor=color, edgecolor='white', linewidth=1.5, zorder=5
            ))
            symbol = '+' if charge.sign is Sign.POSITIVE else '-'
            ax.text(charge.position[0], charge.position[1] - charge.radius - 4,
                    f"#{charge.id} {symbol}{charge.magnitude:g}",
                    ha='center', va='bottom', fontsize=8,
                    color=self.COLORS['text'], zorder=6)

    def plot(self, title: str = "电场线分布",
             save_path: Optional[str] = None) -> plt.Figure:
        """生成2D电场线图"""
        fig, ax = self._create_figure()

        self._plot_lines(ax)
        self._plot_charges(ax)

        n_lines = sum(len(f.lines) for f in self.fields)
        ax.set_title(f"{title}（{len(self.fields)} 个电荷, {n_lines} 条线）",
                     color=self.COLORS['text'])

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight',
                        facecolor=fig.get_facecolor())

        return fig
