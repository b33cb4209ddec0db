"""解析阶段：DOM 构建、值过滤、XPath 求值、页面门控与字段提取

子模块按需导入（rules.models 依赖 xpath_eval，此处不做包级导出以避免循环导入）。
"""
