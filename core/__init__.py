"""
场线引擎核心
场计算、场线追踪、场构建、重复线消除、拖拽节流与仿真状态操作
"""
