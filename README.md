# ssoconfig

`ssoconfig` writes an AWS CLI profile for every account you can reach through
AWS IAM Identity Center (SSO). It signs you in with the device-authorization
flow, lists your accounts, and adds or updates a `[profile <account name>]`
section in your AWS config file for each one.

## Installation

```
pip install ssoconfig
```

This installs the `aws-sso-config` command.

## Generating profiles

```
aws-sso-config generate -config=/path/to/settings.toml
```

A browser window opens for the SSO sign-in (if no browser can be opened, the
URL is printed for you to open by hand). The command then waits, checking every
five seconds for about five minutes, until you approve the request. Each
account's profile is then written with these settings:

- `sso_account_id`
- `sso_role_name`
- `sso_region`
- `sso_start_url`
- `region`

Existing profiles with the same name are updated in place; other sections of
the file are kept. The new file is written next to the old one as
`<config file>.new` and then moved into place. The AWS config file must already
exist.

Options:

- `-diff` prints the output of the system `diff` tool between the old and the
  new file before the old one is replaced.
- `-config=<path>` (or `-config <path>`) reads settings from the given TOML
  file. Without it, `generate` uses the built-in defaults listed below, not
  your `~/.awsssoconfig`, so in practice you will want to pass it.

```
aws-sso-config generate -diff -config=/path/to/settings.toml
```

## Settings

Settings live in a TOML file, by default `~/.awsssoconfig`. When the file is
read and does not exist, it is created with default values:

```toml
# AWS SSO Configuration
[sso]
start_url = "https://your-sso-portal.awsapps.com/start"
region = "us-east-1"
role = "AdministratorAccess"

# AWS Configuration
[aws]
default_region = "us-east-1"
config_file = "~/.aws/config"
```

| Key                  | Meaning                                   |
|----------------------|-------------------------------------------|
| `sso.start_url`      | Your AWS SSO start URL                    |
| `sso.region`         | AWS region for SSO (e.g., us-east-1)      |
| `sso.role`           | SSO role name (e.g., AdministratorAccess) |
| `aws.default_region` | Default AWS region for profiles           |
| `aws.config_file`    | Path to AWS config file                   |

Values missing from the file fall back to these defaults; the built-in default
for `aws.config_file` is the absolute path of `~/.aws/config` in your home
directory. A `~` written into the file is not expanded, so set
`aws.config_file` to an absolute path before running `generate` with that file.

A key that is present in the file can be overridden by an environment
variable named with the prefix `AWS_SSO_CONFIG_`, the section and the key, in
upper case, for example `AWS_SSO_CONFIG_SSO_START_URL`.

### Managing settings from the command line

```
aws-sso-config config list
aws-sso-config config get sso.start_url
aws-sso-config config set sso.start_url https://example.awsapps.com/start
aws-sso-config config set sso.role Administrator Access Role
aws-sso-config config unset sso.start_url
aws-sso-config config edit
aws-sso-config config edit /path/to/settings.toml
```

`get`, `set` and `unset` work on `~/.awsssoconfig`. `set` joins all remaining
words into the value, so quotes are optional. `unset` writes the key's default
value back. Saving rewrites the file, so comments in it are not kept.
`edit` opens the file (creating it with defaults if needed) in `$EDITOR`,
falling back to `vim`, `nano` or `vi`, and loads and validates it afterwards.

## Help

```
aws-sso-config --help
aws-sso-config --version
aws-sso-config generate --help
aws-sso-config config --help
```

## Using it from Python

```python
from ssoconfig.settings import load

settings = load()          # ~/.awsssoconfig, created if missing
settings.validate()        # raises ConfigError if a required value is empty
print(settings.sso.start_url, settings.aws.config_file)
```

Other pieces can be used on their own:

- `ssoconfig.sso` has `SSOOIDCClient` and `SSOPortalClient` for the SSO OIDC and
  portal services, `generate_token_with_config` for the browser sign-in,
  `get_current_token` to read an unexpired token from `~/.aws/sso/cache`, and
  `get_token`, which tries the cache before signing in.
- `ssoconfig.generate` has `generate_aws_config_file` and `ConfigGenerator`.
- `ssoconfig.profiles.get_profile` finds the enclosing git repository and
  returns its name as the profile when that profile exists in the AWS config
  file and its `sso_account_id` matches the `account_id` in the repository's
  `terragrunt.hcl`; otherwise it returns `"default"`, and it returns `""`
  when `AWS_PROFILE` is already set.

## Limitations

- `generate` always runs the browser sign-in; it does not reuse a token from
  the SSO cache.
- The SSO services are called at their `us-east-1` endpoints, whatever
  `sso.region` is set to.
- Only the first page of accounts returned by the SSO portal is used.
- Every profile gets the single role from `sso.role`; roles are not looked up
  per account.

## Running the tests

```
pip install ssoconfig[test]
pytest
```