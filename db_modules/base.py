import json
from enum import Enum


def build_update(table, changes, key_column, key_value, extra_where=''):
    """根据局部更新字段生成 UPDATE 语句；没有字段时返回 (None, None)"""
    if not changes:
        return None, None
    assignments = []
    params = []
    for column, value in changes.items():
        assignments.append(f"{column} = %s")
        params.append(to_db_value(value))
    sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE {key_column} = %s{extra_where}"
    params.append(key_value)
    return sql, tuple(params)


def to_db_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value
