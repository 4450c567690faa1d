# 开启嵌套的结构字符
OPEN_MARKERS = ("{", "[")
# 全部四个结构字符（开 + 闭）
PAIRED_MARKERS = ("{", "}", "[", "]")
# 开 -> 闭
COUNTERPARTS = {
    "{": "}",
    "[": "]",
}

CLOSER_POLICY_COMPAT = "compat"
CLOSER_POLICY_STRICT = "strict"
CLOSER_POLICIES = (CLOSER_POLICY_COMPAT, CLOSER_POLICY_STRICT)
