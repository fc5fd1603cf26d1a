"""Docusaurus docs plugin: fixes table separators and strips front matter."""

import re

from .base import Plugin, PluginContext, PluginOptions

TABLE_SEPARATOR_PATTERN = re.compile(r'\| --')
FRONT_MATTER_PATTERN = re.compile(r'^---(.|\n)*?---', re.MULTILINE)


def pre_parse(text: str, context: PluginContext) -> str:
    text = TABLE_SEPARATOR_PATTERN.sub('|--', text)
    return FRONT_MATTER_PATTERN.sub('', text)


def create_plugin(options: PluginOptions) -> Plugin:
    return Plugin(name='docusaurus', pre_parse=pre_parse)
