#! /usr/bin/env python3
# -*- coding: utf-8 -*-

"""
命令树控制台启动入口

从标准输入逐行读取消息，模拟一个聊天频道，便于在本地调试命令配置。
"""

import sys
import logging
from argparse import ArgumentParser
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from cmdtree import Actor, CommandRouter, DispatcherConfig, MessageContext, __version__


def setup_logging(level: str = "INFO"):
    """设置日志"""
    # 创建日志目录
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    # 日志级别映射
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR
    }

    log_level = level_map.get(level.upper(), logging.INFO)

    # 配置日志格式
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # 设置根日志器，控制台输出走 stderr，避免和回复混在一起
    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.FileHandler(log_dir / "cmdtree.log", encoding='utf-8'),
            logging.StreamHandler(sys.stderr)
        ]
    )


DEFAULT_CONFIG = """# 命令树配置文件

bot_name: "智能助手"
prefixes:
  - "!"
owner_ids:
  - "your_user_id_here"
log_level: "INFO"

commands:
  ping:
    response: "pong"
    description: "检查机器人是否在线"
  hello:
    responses:
      - "你好！"
      - "嗨~"
      - "早上好"
    aliases: [hi]
    case_insensitive: true
  echo:
    handler: echo
    usage: "<内容>"
  whoami:
    handler: whoami
  roll:
    handler: roll
    aliases: [r]
    usage: "[NdM]"
  choose:
    handler: choose
  admin:
    response: "管理命令: !admin purge"
    guild_only: true
    requirements:
      permissions:
        manageMessages: true
    subcommands:
      purge:
        response: "已清理"
        delete_command: true
  shutdown:
    response: "正在关闭..."
    owner_only: true
"""


def create_default_config(config_path: str = "config.yaml"):
    """创建默认配置文件"""
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)

    print(f"已创建默认配置文件 {config_path}")
    print("请编辑配置文件后重新启动")


def parse_permissions(value: str) -> dict:
    """解析 "manageMessages,!administrator" 形式的权限列表"""
    permissions = {}
    for item in filter(None, (part.strip() for part in value.split(","))):
        if item.startswith("!"):
            permissions[item[1:]] = False
        else:
            permissions[item] = True
    return permissions


def main():
    parser = ArgumentParser(description=f"命令树控制台 v{__version__}")
    parser.add_argument('-c', '--config', default='config.yaml', help='配置文件路径')
    parser.add_argument('-l', '--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='日志级别，默认读取配置文件')
    parser.add_argument('--create-config', action='store_true', help='创建默认配置文件')
    parser.add_argument('--user', default='console', help='模拟的用户ID')
    parser.add_argument('--roles', default='', help='模拟的身份组，格式: id=名称,id=名称')
    parser.add_argument('--permissions', default='', help='模拟的权限，格式: manageMessages,!administrator')
    parser.add_argument('--dm', action='store_true', help='模拟私聊')

    args = parser.parse_args()

    # 创建默认配置
    if args.create_config:
        create_default_config(args.config)
        return

    # 检查配置文件
    if not Path(args.config).exists():
        print(f"配置文件 {args.config} 不存在")
        print("使用 --create-config 创建默认配置文件")
        return

    config = DispatcherConfig.from_file(args.config)

    # 设置日志
    setup_logging(args.log_level or config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"命令树控制台 v{__version__} 启动中...")

    roles = {}
    for item in filter(None, (part.strip() for part in args.roles.split(","))):
        role_id, _, name = item.partition("=")
        roles[role_id] = name or role_id

    try:
        root = config.build_tree()
        router = CommandRouter(root, config.prefixes)
    except Exception as e:
        logger.error(f"构建命令树失败: {e}", exc_info=True)
        sys.exit(1)

    actor = Actor(id=args.user, name=args.user, role_ids=list(roles))
    permissions = parse_permissions(args.permissions)

    try:
        for line in sys.stdin:
            ctx = MessageContext(
                actor=actor,
                text=line.rstrip("\n"),
                is_group=not args.dm,
                permissions=permissions,
                roles=roles,
            )
            result = router.dispatch(ctx)
            if result is None:
                continue
            if result.error is not None:
                print("❌ 命令执行出错")
            elif result.response:
                print(result.response)
            if result.delete_command:
                logger.info(f"删除命令消息: {ctx.text}")
    except KeyboardInterrupt:
        logger.info("用户中断，正在停止...")

    logger.info("控制台已停止")


if __name__ == "__main__":
    main()
