"""
sops-shell keeps values in SOPS encrypted files in sync with the output of shell commands.

A value is bound to a command by a comment directly above its key. Comments start with '#' or
';' so the same annotation works in YAML, ENV and INI files:

\b
    # shell: aws sts get-session-token --query Credentials.SessionToken --output text
    aws_session_token: ...

Each file is decrypted with sops, every annotated command is run with 'sh -c' and the output is
compared with the stored value. Values that differ are written back with 'sops --set'.

Show which secrets are out of date without changing anything:

\b
    $ sops-shell check secrets.enc.yaml

Update every out of date secret:

\b
    $ sops-shell sync secrets.enc.yaml other.enc.env
"""

__version__ = '0.1.0'
