# Generated manually for django-carbon-registry

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("carbon_registry", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ProjectCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("color", models.CharField(default="green", help_text="Badge color used by clients", max_length=20)),
            ],
            options={
                "verbose_name_plural": "Project categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Methodology",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("document_url", models.URLField(blank=True, default="")),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="methodologies",
                        to="carbon_registry.projectcategory",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Methodologies",
                "ordering": ["name"],
            },
        ),
    ]
