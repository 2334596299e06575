"""
场线可视化预览
"""
