"""
Business Layer - 业务模块层

成本账本的业务逻辑层，包含：
- ledger: 交易变更协调与账本存储
- portfolio: 资产级操作、导入、汇总与旧版迁移
- config: 配置管理
- cli: 命令行工具
"""
