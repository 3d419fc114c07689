"""Unit tests for compute and storage request bodies."""

from azvmnet.vm_templates import (
    ImageReference,
    Tier,
    computer_name,
    storage_account_body,
    virtual_machine_body,
    vm_name,
)


class TestNames:
    """Test VM and host naming."""

    def test_vm_names_carry_tier(self):
        assert vm_name(Tier.FRONTEND, 0) == "VM-FE-0"
        assert vm_name(Tier.BACKEND, 9) == "VM-BE-9"

    def test_computer_names_unique_across_tiers(self):
        names = {computer_name("linuxvm1234", tier, i) for tier in Tier for i in range(10)}

        assert len(names) == 20
        assert computer_name("linuxvm1234", Tier.BACKEND, 3) == "linuxvm1234-be3"


class TestVirtualMachineBody:
    """Test the VM request body."""

    def build(self, **overrides):
        args = {
            "region": "eastus",
            "vm_size": "Standard_D2a_v4",
            "admin_username": "azureuser",
            "admin_password": "Str0ng!Passw0rd-xyz",
            "hostname": "linuxvm1234-fe0",
            "nic_id": "nic-id",
            "image": ImageReference(),
        }
        args.update(overrides)
        return virtual_machine_body(**args)

    def test_os_profile(self):
        profile = self.build()["os_profile"]

        assert profile["computer_name"] == "linuxvm1234-fe0"
        assert profile["admin_username"] == "azureuser"
        assert profile["linux_configuration"] == {"disable_password_authentication": False}

    def test_single_primary_nic(self):
        assert self.build()["network_profile"] == {
            "network_interfaces": [{"id": "nic-id", "primary": True}]
        }

    def test_managed_os_disk_from_image(self):
        storage = self.build()["storage_profile"]

        assert storage["os_disk"]["create_option"] == "FromImage"
        assert storage["os_disk"]["managed_disk"] == {"storage_account_type": "Standard_LRS"}
        assert storage["image_reference"]["publisher"] == "Canonical"

    def test_size_and_image_are_configurable(self):
        image = ImageReference(offer="custom-offer", sku="custom-sku")

        body = self.build(vm_size="Standard_B2s", image=image)

        assert body["hardware_profile"] == {"vm_size": "Standard_B2s"}
        assert body["storage_profile"]["image_reference"]["offer"] == "custom-offer"


class TestStorageAccountBody:
    """Test the storage account body."""

    def test_storage_v2_with_sku(self):
        assert storage_account_body("eastus", "Standard_LRS") == {
            "location": "eastus",
            "kind": "StorageV2",
            "sku": {"name": "Standard_LRS"},
        }
