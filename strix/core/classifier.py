"""
Figures out what kind of content a string holds and whether it names
any API commonly abused by malware.
"""
import re

from strix.core.models import ApiGroup, Category


# Every detector runs independently; a string collects all the ones that hit
CATEGORY_PATTERNS = (
    (Category.URL, re.compile(r"https?://[^\s<>\"']+|ftp://[^\s<>\"']+|www\.[^\s<>\"']+")),
    (Category.EMAIL, re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")),
    (Category.IPV4, re.compile(
        r"\b(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\b")),
    (Category.IPV6, re.compile(r"\b(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}\b")),
    (Category.DOMAIN, re.compile(
        r"\b(?:[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)+"
        r"(?:com|net|org|io|ru|cn|tk|xyz|top|info|biz|cc|pw|onion|edu|gov|mil|co)\b")),
    (Category.WIN_PATH, re.compile(r"[A-Za-z]:\\(?:[^\s\\/:*?\"<>|]+\\)*[^\s\\/:*?\"<>|]*")),
    (Category.UNIX_PATH, re.compile(r"(?:/[a-zA-Z0-9._\-]+){2,}")),
    (Category.REGISTRY, re.compile(r"(?:HKEY_[A-Z_]+|HKLM|HKCU|HKCR)\\\S+")),
    (Category.DLL_API, re.compile(
        r"\b[A-Za-z_][A-Za-z0-9_]*\.(?:dll|sys|ocx|drv)\b"
        r"|\b(?:Create|Open|Read|Write|Close|Delete|Find|Get|Set|Load|Free|Virtual|Reg"
        r"|Crypt|Http|Internet|Socket|WSA|Nt|Zw)[A-Z][a-zA-Z0-9_]*(?:A|W|Ex|ExA|ExW)?\b",
        re.IGNORECASE)),
    (Category.ERROR, re.compile(
        r"\b(?:error|fail|exception|warning|assert|debug|fatal|panic|abort|denied"
        r"|invalid|corrupt)\b", re.IGNORECASE)),
    (Category.CRYPTO, re.compile(
        r"\b(?:AES|RSA|SHA[0-9]*|MD5|HMAC|CBC|ECB|GCM|PKCS"
        r"|BEGIN\s+(?:RSA|DSA|EC|PRIVATE|PUBLIC|CERTIFICATE))\b"
        r"|-----BEGIN\s[^\-]+-----", re.IGNORECASE)),
    (Category.BASE64_BLOB, re.compile(r"[A-Za-z0-9+/]{20,}={0,2}")),
    (Category.HASH_MD5, re.compile(r"\b[a-fA-F0-9]{32}\b")),
    (Category.HASH_SHA1, re.compile(r"\b[a-fA-F0-9]{40}\b")),
    (Category.HASH_SHA256, re.compile(r"\b[a-fA-F0-9]{64}\b")),
    (Category.CREDENTIAL, re.compile(
        r"(?:password|passwd|pwd|secret|token|api[_\-]?key|access[_\-]?key|auth[_\-]?token"
        r"|bearer|credential|AWS_SECRET|AWS_ACCESS|PRIVATE[_\-]?KEY|client[_\-]?secret)"
        r"\s*[=:]\s*\S+", re.IGNORECASE)),
    (Category.BASIC_AUTH, re.compile(r"Basic\s+[A-Za-z0-9+/=]{10,}", re.IGNORECASE)),
    (Category.BEARER_TOKEN, re.compile(r"Bearer\s+[A-Za-z0-9._~+/=\-]{10,}", re.IGNORECASE)),
    (Category.PORT, re.compile(r"\b(?:port|listen|bind)\s*[=:]\s*\d{1,5}\b", re.IGNORECASE)),
)

CREDENTIAL_CATEGORIES = frozenset({
    Category.CREDENTIAL, Category.BASIC_AUTH, Category.BEARER_TOKEN,
})


# API name fragments grouped by what the caller is probably up to.
# Order matters: the first group with a hit wins.
SUSPICIOUS_API_GROUPS = (
    (ApiGroup.PROCESS, (
        'CreateProcess', 'OpenProcess', 'TerminateProcess', 'CreateRemoteThread',
        'VirtualAllocEx', 'WriteProcessMemory', 'ReadProcessMemory', 'NtCreateProcess',
        'CreateThread', 'SuspendThread', 'ResumeThread',
    )),
    (ApiGroup.INJECTION, (
        'SetWindowsHookEx', 'CreateRemoteThread', 'QueueUserAPC', 'NtQueueApcThread',
        'RtlCreateUserThread', 'NtMapViewOfSection', 'NtWriteVirtualMemory',
        'NtUnmapViewOfSection',
    )),
    (ApiGroup.REGISTRY, (
        'RegOpenKey', 'RegSetValue', 'RegCreateKey', 'RegDeleteKey', 'RegQueryValue',
        'RegEnumKey', 'RegEnumValue',
    )),
    (ApiGroup.NETWORK, (
        'WSAStartup', 'socket', 'connect', 'send', 'recv', 'bind', 'listen',
        'InternetOpen', 'HttpOpenRequest', 'HttpSendRequest', 'URLDownloadToFile',
        'WinHttpOpen', 'WinHttpConnect', 'WinHttpSendRequest', 'getaddrinfo',
        'gethostbyname', 'inet_addr',
    )),
    (ApiGroup.FILE, (
        'CreateFile', 'WriteFile', 'ReadFile', 'DeleteFile', 'CopyFile', 'MoveFile',
        'FindFirstFile', 'GetTempPath', 'GetSystemDirectory', 'CreateDirectory',
        'RemoveDirectory',
    )),
    (ApiGroup.CRYPTO, (
        'CryptEncrypt', 'CryptDecrypt', 'CryptGenKey', 'CryptAcquireContext',
        'BCryptEncrypt', 'BCryptDecrypt', 'CryptHashData', 'CryptDeriveKey',
    )),
    (ApiGroup.EVASION, (
        'IsDebuggerPresent', 'CheckRemoteDebuggerPresent', 'NtQueryInformationProcess',
        'GetTickCount', 'Sleep', 'VirtualProtect', 'OutputDebugString',
        'NtSetInformationThread', 'QueryPerformanceCounter', 'GetSystemTime',
    )),
    (ApiGroup.PRIVILEGE, (
        'AdjustTokenPrivileges', 'OpenProcessToken', 'LookupPrivilegeValue',
        'ImpersonateLoggedOnUser', 'DuplicateToken', 'SetThreadToken',
    )),
    (ApiGroup.SERVICE, (
        'OpenSCManager', 'CreateService', 'StartService', 'ControlService',
        'DeleteService', 'ChangeServiceConfig',
    )),
)

_LOWERED_API_GROUPS = tuple(
    (group, tuple(name.lower() for name in names))
    for group, names in SUSPICIOUS_API_GROUPS
)


# Shorthands accepted by --only
ONLY_PRESETS = {
    'urls': (Category.URL,),
    'apis': (Category.DLL_API,),
    'passwords': (Category.CREDENTIAL, Category.BASIC_AUTH, Category.BEARER_TOKEN),
    'network': (Category.URL, Category.IPV4, Category.IPV6, Category.DOMAIN, Category.PORT),
    'paths': (Category.WIN_PATH, Category.UNIX_PATH, Category.REGISTRY),
    'crypto': (Category.CRYPTO,),
    'hashes': (Category.HASH_MD5, Category.HASH_SHA1, Category.HASH_SHA256),
    'emails': (Category.EMAIL,),
    'suspicious': (Category.DLL_API, Category.CREDENTIAL, Category.BASIC_AUTH,
                   Category.BEARER_TOKEN, Category.CRYPTO),
}


def classify_string(text):
    """Return the set of categories whose detector matches *text*."""
    found = frozenset(category for category, pattern in CATEGORY_PATTERNS
                      if pattern.search(text))
    return found or frozenset({Category.GENERAL})


def suspicious_api_group(text):
    """First API group with a fragment inside *text* (case-insensitive), or None."""
    lower_text = text.lower()
    for group, names in _LOWERED_API_GROUPS:
        if any(name in lower_text for name in names):
            return group
    return None


def resolve_only(names):
    """
    Expand preset names into category names.

    Anything that isn't a preset is kept as a literal category name, so
    ``['passwords', 'url']`` becomes ``{'credential', 'basic_auth',
    'bearer_token', 'url'}``.
    """
    wanted = set()
    for name in names:
        name = name.strip().lower()
        if not name:
            continue
        if name in ONLY_PRESETS:
            wanted.update(category.value for category in ONLY_PRESETS[name])
        else:
            wanted.add(name)
    return frozenset(wanted)


def matches_only(candidate, wanted):
    """Does the candidate fall into any of the *wanted* category names?"""
    if any(category.value in wanted for category in candidate.categories):
        return True
    # A string naming a known API counts as an API hit even without the dll_api regex
    return Category.DLL_API.value in wanted and candidate.api_group is not None
