"""核心业务逻辑模块.

图层存储、渲染、命中测试和文档会话。
"""
