"""
检查服务组件
"""
